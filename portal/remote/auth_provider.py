"""Authentication surface of the backend.

``AuthProvider`` issues and revokes sessions. It does not decide whether an
identity may use the console; that is the job of the role authorizer, which
the session gateway runs whenever this provider announces a sign-in.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

import jwt

from portal.auth import jwt_handler
from portal.auth.passwords import verify_password
from portal.core import config
from portal.core.exceptions import AuthenticationError, BackendError
from portal.models.auth_session import AuthSessionRecord
from portal.models.user import User
from portal.remote.tables import TableClient

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid login credentials"


class SessionEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


@dataclass(frozen=True)
class AuthSession:
    session_id: str
    user_id: str
    email: str | None
    expires_at: datetime
    token: str
    full_name: str | None = None


SessionListener = Callable[[SessionEvent, AuthSession | None], None]


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _default_sso_auth_factory(request_data: dict):
    from portal.auth import saml

    return saml.init_saml_auth(request_data)


class AuthProvider:
    """Password and SSO sign-in backed by signed tokens and server-side session rows."""

    def __init__(self, client: TableClient, sso_auth_factory: Callable[[dict], object] | None = None):
        self.client = client
        self.sso_auth_factory = sso_auth_factory or _default_sso_auth_factory
        self._listeners: list[SessionListener] = []

    def on_session_change(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def _emit(self, event: SessionEvent, session: AuthSession | None) -> None:
        for listener in self._listeners:
            listener(event, session)

    def _issue_session(self, user_id: str, email: str | None, full_name: str | None = None) -> AuthSession:
        session_id = secrets.token_urlsafe(24)
        token, expires_at = jwt_handler.create_session_token(user_id, session_id, email=email)
        self.client.insert(
            AuthSessionRecord(
                id=session_id,
                user_uid=user_id,
                email=email,
                full_name=full_name,
                expires_at=expires_at,
            )
        )
        session = AuthSession(
            session_id=session_id,
            user_id=user_id,
            email=email,
            expires_at=expires_at,
            token=token,
            full_name=full_name,
        )
        self._emit(SessionEvent.SIGNED_IN, session)
        return session

    def sign_in(self, email: str, password: str) -> AuthSession:
        normalized = email.strip().lower()
        user = self.client.maybe_single(User, email=normalized)
        if user is None or not verify_password(password, user.hashed_password):
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
        return self._issue_session(user.uid, user.email)

    def sign_in_with_oauth(self, provider: str, request_data: dict) -> str:
        """Return the identity provider URL the browser must be redirected to."""
        if provider != config.SSO_PROVIDER_NAME:
            raise AuthenticationError(f"Unsupported sign-in provider '{provider}'")
        auth = self.sso_auth_factory(request_data)
        return auth.login()

    def complete_oauth(self, request_data: dict) -> AuthSession:
        auth = self.sso_auth_factory(request_data)
        auth.process_response()
        errors = auth.get_errors()
        if errors:
            raise AuthenticationError(f"Single sign-on failed: {', '.join(errors)}")
        if not auth.is_authenticated():
            raise AuthenticationError("Single sign-on did not authenticate the user")

        attributes = auth.get_attributes()
        name_id = auth.get_nameid()
        email_candidates = (
            attributes.get("email")
            or attributes.get("Email")
            or attributes.get("mail")
            or []
        )
        email = (email_candidates[0] if email_candidates else name_id or "").strip().lower()
        if not email:
            raise AuthenticationError("Email not found in single sign-on response")
        first_name = (attributes.get("FirstName") or [""])[0]
        last_name = (attributes.get("LastName") or [""])[0]
        full_name = f"{first_name} {last_name}".strip() or None

        user = self.client.maybe_single(User, sso_subject=name_id) if name_id else None
        if user is None:
            user = self.client.maybe_single(User, email=email)
        if user is None:
            # Identity exists at the provider only; the authorizer will reject it.
            return self._issue_session(name_id or email, email, full_name)
        if not user.sso_subject and name_id:
            self.client.update(User, {"sso_subject": name_id}, uid=user.uid)
        return self._issue_session(user.uid, user.email, full_name)

    def get_session(self, token: str | None) -> AuthSession | None:
        if not token:
            return None
        try:
            payload = jwt_handler.decode_session_token(token)
            record = self.client.maybe_single(AuthSessionRecord, id=payload.get("sid"))
        except jwt.PyJWTError:
            logger.debug("Discarding invalid session token")
            return None
        except BackendError:
            logger.exception("Session lookup failed")
            return None
        if record is None or record.user_uid != payload.get("sub"):
            return None
        expires_at = _as_utc(record.expires_at)
        if expires_at <= datetime.now(timezone.utc):
            return None
        return AuthSession(
            session_id=record.id,
            user_id=record.user_uid,
            email=record.email,
            expires_at=expires_at,
            token=token,
            full_name=record.full_name,
        )

    def sign_out(self, token: str | None) -> None:
        if token:
            try:
                payload = jwt_handler.decode_session_token(token)
            except jwt.PyJWTError:
                payload = {}
            session_id = payload.get("sid")
            if session_id:
                self.client.delete(AuthSessionRecord, id=session_id)
        self._emit(SessionEvent.SIGNED_OUT, None)
