"""Per-request session context handed to every page."""

import logging
from dataclasses import dataclass

from portal.auth.authorizer import AuthorizationResult, CurrentUser, RejectionReason, RoleAuthorizer
from portal.core import config
from portal.core.exceptions import AuthenticationError, BackendError
from portal.remote.auth_provider import AuthProvider, AuthSession, SessionEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    success: bool
    error: str | None = None
    token: str | None = None
    reason: RejectionReason | None = None


class SessionGateway:
    """Wraps the auth provider for a single page load.

    Sign-in events re-run authorization; a rejected identity is signed
    straight back out so an authenticated but unauthorized session never
    outlives the request that created it.
    """

    def __init__(
        self,
        provider: AuthProvider,
        authorizer: RoleAuthorizer,
        token: str | None = None,
        current_path: str = config.ENTRY_PAGE,
    ):
        self.provider = provider
        self.authorizer = authorizer
        self.token = token
        self.current_path = current_path
        self.current_user: CurrentUser | None = None
        self.rejection: AuthorizationResult | None = None
        self.redirect_to: str | None = None
        provider.on_session_change(self._handle_session_change)

    def _handle_session_change(self, event: SessionEvent, session: AuthSession | None) -> None:
        if event is SessionEvent.SIGNED_IN and session is not None:
            self.token = session.token
            self.authorize_session(session)
        elif event is SessionEvent.SIGNED_OUT:
            self.current_user = None
            self.token = None
            if self.current_path != config.ENTRY_PAGE:
                self.redirect_to = config.ENTRY_PAGE

    def get_current_session(self) -> AuthSession | None:
        return self.provider.get_session(self.token)

    def authorize_session(self, session: AuthSession) -> AuthorizationResult:
        result = self.authorizer.authorize(session.user_id, email=session.email, full_name=session.full_name)
        if result.granted:
            self.current_user = result.profile
            self.rejection = None
        else:
            self.rejection = result
            self._revoke(session.token)
        return result

    def login(self, email: str, password: str) -> LoginResult:
        try:
            self.provider.sign_in(email, password)
        except AuthenticationError as exc:
            return LoginResult(success=False, error=str(exc))
        except BackendError:
            logger.exception("Login failed for %s", email)
            return LoginResult(success=False, error="An unexpected error occurred. Please try again.")
        return self._login_outcome()

    def login_with_oauth(self, provider: str, request_data: dict) -> str:
        return self.provider.sign_in_with_oauth(provider, request_data)

    def complete_oauth(self, request_data: dict) -> LoginResult:
        try:
            self.provider.complete_oauth(request_data)
        except AuthenticationError as exc:
            return LoginResult(success=False, error=str(exc))
        except BackendError:
            logger.exception("Single sign-on could not be completed")
            return LoginResult(success=False, error="Single sign-on failed. Please try again.")
        return self._login_outcome()

    def _login_outcome(self) -> LoginResult:
        if self.current_user is not None:
            return LoginResult(success=True, token=self.token)
        reason = self.rejection.reason if self.rejection else RejectionReason.LOOKUP_FAILED
        return LoginResult(success=False, error=reason.message, reason=reason)

    def logout(self) -> str | None:
        """Revoke the session and return where the browser should go next."""
        self._revoke(self.token)
        self.current_user = None
        return self.redirect_to

    def _revoke(self, token: str | None) -> None:
        try:
            self.provider.sign_out(token)
        except BackendError:
            logger.exception("Sign-out failed")
            self.current_user = None
            self.token = None
