import re

import pytest

from portal.auth.authorizer import RejectionReason, RoleAuthorizer, generate_staff_id
from portal.core.exceptions import BackendError
from portal.models.admin_info import AdminProfile
from portal.models.user import Role, User
from portal.remote.tables import TableClient


class _BrokenTableClient(TableClient):
    def maybe_single(self, model, **filters):
        raise BackendError('connection reset')


def test_generate_staff_id_uses_admin_prefix_and_six_digits() -> None:
    assert re.fullmatch(r'ADMIN\d{6}', generate_staff_id())


@pytest.mark.parametrize('role', [Role.STUDENT.value, Role.ALUMNI.value, 'moderator'])
def test_authorize_rejects_non_admin_roles(table_client, seed, role: str) -> None:
    seed.user('u-1', 'person@example.com', role)

    result = RoleAuthorizer(table_client).authorize('u-1')

    assert not result.granted
    assert result.reason is RejectionReason.INSUFFICIENT_PRIVILEGE
    assert result.message == 'Access denied. Admin privileges required.'


def test_authorize_unknown_identity_is_account_not_found_and_creates_nothing(table_client, db_session) -> None:
    result = RoleAuthorizer(table_client).authorize('ghost', email='ghost@example.com')

    assert result.reason is RejectionReason.ACCOUNT_NOT_FOUND
    assert result.message == 'Account not found. Please contact Super Admin to create your account.'
    assert db_session.query(User).count() == 0
    assert db_session.query(AdminProfile).count() == 0


def test_authorize_provisions_admin_info_on_first_sign_in(table_client, seed, db_session) -> None:
    seed.user('u-2', 'grace.hopper@example.com', Role.SUPER_ADMIN.value)

    result = RoleAuthorizer(table_client).authorize('u-2')

    assert result.granted
    assert result.profile.role is Role.SUPER_ADMIN
    assert result.profile.is_super_admin
    assert result.profile.full_name == 'grace.hopper'
    assert result.profile.department == 'IT Administration'
    assert re.fullmatch(r'ADMIN\d{6}', result.profile.staff_id)
    assert db_session.query(AdminProfile).filter_by(user_uid='u-2').count() == 1


def test_authorize_prefers_identity_full_name_when_provisioning(table_client, seed) -> None:
    seed.user('u-3', 'ops@example.com', Role.ADMIN.value)

    result = RoleAuthorizer(table_client).authorize('u-3', full_name='Olive Ops')

    assert result.profile.full_name == 'Olive Ops'


def test_authorize_is_idempotent(table_client, seed, db_session) -> None:
    seed.admin()
    authorizer = RoleAuthorizer(table_client)

    first = authorizer.authorize('admin-1')
    second = authorizer.authorize('admin-1')

    assert first.profile == second.profile
    assert first.profile.staff_id == 'ADMIN000001'
    assert db_session.query(AdminProfile).count() == 1


def test_authorize_reports_lookup_failure(db_session) -> None:
    result = RoleAuthorizer(_BrokenTableClient(db_session)).authorize('admin-1')

    assert result.reason is RejectionReason.LOOKUP_FAILED
    assert result.message == 'Failed to access user record. Please contact support.'


def test_current_user_display_helpers(table_client, seed) -> None:
    seed.admin(email='kim@example.com')

    profile = RoleAuthorizer(table_client).authorize('admin-1').profile

    assert profile.display_name == 'kim'
    assert profile.avatar_initial == 'K'
    assert profile.role_label == 'Admin'
