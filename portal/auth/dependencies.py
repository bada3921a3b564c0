from fastapi import Depends, Request
from sqlalchemy.orm import Session

from portal.auth.authorizer import CurrentUser, RejectionReason, RoleAuthorizer
from portal.auth.session import SessionGateway
from portal.core import config
from portal.core.exceptions import AuthorizationError
from portal.database import SessionLocal
from portal.remote.auth_provider import AuthProvider
from portal.remote.tables import TableClient


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_table_client(db: Session = Depends(get_db)) -> TableClient:
    return TableClient(db)


def get_auth_provider(client: TableClient = Depends(get_table_client)) -> AuthProvider:
    return AuthProvider(client)


def get_session_gateway(
    request: Request,
    client: TableClient = Depends(get_table_client),
    provider: AuthProvider = Depends(get_auth_provider),
) -> SessionGateway:
    return SessionGateway(
        provider,
        RoleAuthorizer(client),
        token=request.cookies.get(config.SESSION_COOKIE_NAME),
        current_path=request.url.path,
    )


def require_admin(gateway: SessionGateway = Depends(get_session_gateway)) -> CurrentUser:
    session = gateway.get_current_session()
    if session is None:
        raise AuthorizationError(RejectionReason.NO_SESSION, RejectionReason.NO_SESSION.message)

    result = gateway.authorize_session(session)
    if not result.granted:
        raise AuthorizationError(result.reason, result.message)
    return result.profile
