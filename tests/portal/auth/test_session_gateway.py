from portal.auth.authorizer import RejectionReason, RoleAuthorizer
from portal.auth.session import SessionGateway
from portal.core.exceptions import BackendError
from portal.models.auth_session import AuthSessionRecord
from portal.models.user import Role
from portal.remote.auth_provider import AuthProvider


class _SignOutFailsProvider(AuthProvider):
    def sign_out(self, token):
        raise BackendError('network down')


class _StrangerSsoAuth:
    def process_response(self):
        return None

    def get_errors(self):
        return []

    def is_authenticated(self):
        return True

    def get_attributes(self):
        return {'email': ['stranger@example.com']}

    def get_nameid(self):
        return 'idp-only'


def _gateway(table_client, provider=None, token=None, current_path='/dashboard') -> SessionGateway:
    return SessionGateway(
        provider or AuthProvider(table_client),
        RoleAuthorizer(table_client),
        token=token,
        current_path=current_path,
    )


def test_login_authorizes_admin_and_keeps_token(table_client, seed) -> None:
    seed.admin(password='secret1')
    gateway = _gateway(table_client, current_path='/')

    result = gateway.login('admin@example.com', 'secret1')

    assert result.success
    assert result.token == gateway.token
    assert gateway.current_user.uid == 'admin-1'
    assert gateway.get_current_session().user_id == 'admin-1'


def test_login_with_wrong_password_reports_provider_message(table_client, seed) -> None:
    seed.admin(password='secret1')

    result = _gateway(table_client).login('admin@example.com', 'nope')

    assert not result.success
    assert result.error == 'Invalid login credentials'
    assert result.reason is None


def test_rejected_identity_is_signed_out_immediately(table_client, seed, db_session) -> None:
    seed.user('alum-1', 'alum@example.com', Role.ALUMNI.value, password='secret1')
    gateway = _gateway(table_client, current_path='/')

    result = gateway.login('alum@example.com', 'secret1')

    assert not result.success
    assert result.reason is RejectionReason.INSUFFICIENT_PRIVILEGE
    assert result.error == 'Access denied. Admin privileges required.'
    assert gateway.current_user is None
    assert gateway.token is None
    assert db_session.query(AuthSessionRecord).count() == 0


def test_sign_out_off_the_entry_page_requests_redirect(table_client, seed) -> None:
    seed.admin(password='secret1')
    provider = AuthProvider(table_client)
    token = provider.sign_in('admin@example.com', 'secret1').token
    gateway = _gateway(table_client, provider=provider, token=token, current_path='/users')

    assert gateway.logout() == '/'
    assert gateway.current_user is None
    assert gateway.get_current_session() is None


def test_sign_out_on_the_entry_page_stays_put(table_client) -> None:
    gateway = _gateway(table_client, current_path='/')

    assert gateway.logout() is None


def test_failed_revoke_still_clears_local_state(table_client, seed) -> None:
    seed.admin(password='secret1')
    token = AuthProvider(table_client).sign_in('admin@example.com', 'secret1').token
    gateway = _gateway(table_client, provider=_SignOutFailsProvider(table_client), token=token)
    gateway.authorize_session(gateway.get_current_session())

    gateway.logout()

    assert gateway.current_user is None
    assert gateway.token is None


def test_sso_identity_without_account_is_rejected(table_client, db_session) -> None:
    provider = AuthProvider(table_client, sso_auth_factory=lambda request_data: _StrangerSsoAuth())
    gateway = _gateway(table_client, provider=provider, current_path='/')

    result = gateway.complete_oauth({})

    assert result.reason is RejectionReason.ACCOUNT_NOT_FOUND
    assert gateway.rejection.reason is RejectionReason.ACCOUNT_NOT_FOUND
    assert db_session.query(AuthSessionRecord).count() == 0
