import re
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from portal.controllers.user_directory import (
    CreateAdminRequest,
    UserDirectoryController,
    UserRow,
    filter_by_role,
    generate_manual_uid,
    search_users,
)
from portal.models.admin_info import AdminProfile
from portal.models.alumni_profile import AlumniProfile
from portal.models.user import Role, User

ROWS = [
    UserRow('u-1', 'alice@example.com', 'alumni', 'Alice Alum', None),
    UserRow('u-2', 'bob@example.com', 'student', 'Bob Student', None),
    UserRow('u-3', 'carol@example.com', 'admin', 'Carol Admin', None),
    UserRow('u-4', 'dave@example.com', 'super_admin', 'Dave Root', None),
    UserRow('u-5', 'erin@example.com', 'alumni', 'N/A', None),
]

VALID_FORM = {'email': 'a@b.com', 'password': 'secret1', 'full_name': 'Jane Doe', 'department': '', 'role': 'admin'}


@pytest.fixture()
def directory_users(seed):
    seed.admin(uid='root-1', email='root@example.com', role=Role.SUPER_ADMIN.value, full_name='Root Admin')
    seed.alumni('a-1', 'alice@example.com', 'Alice Alum', created_at=datetime(2026, 10, 3, tzinfo=timezone.utc))
    seed.student('s-1', 'bob@example.com', 'Bob Student', created_at=datetime(2026, 10, 2, tzinfo=timezone.utc))


@pytest.mark.parametrize('role_filter', ['all', 'alumni', 'student', 'admin'])
@pytest.mark.parametrize('term', ['', 'ALICE', 'example', 'dave', 'nobody'])
def test_role_filter_and_search_commute(role_filter: str, term: str) -> None:
    assert filter_by_role(search_users(ROWS, term), role_filter) == search_users(filter_by_role(ROWS, role_filter), term)


def test_admin_filter_includes_super_admins() -> None:
    assert [row.uid for row in filter_by_role(ROWS, 'admin')] == ['u-3', 'u-4']


def test_search_matches_email_or_name_case_insensitively() -> None:
    assert [row.uid for row in search_users(ROWS, '  bob ')] == ['u-2']
    assert [row.uid for row in search_users(ROWS, 'root')] == ['u-4']


def test_generate_manual_uid_format() -> None:
    assert re.fullmatch(r'manual-\d+-[0-9a-z]{6}', generate_manual_uid())


def test_create_admin_request_defaults_department_and_normalizes_email() -> None:
    request = CreateAdminRequest(email=' A@B.com ', full_name=' Jane Doe ', password='secret1')

    assert request.email == 'a@b.com'
    assert request.full_name == 'Jane Doe'
    assert request.department == 'IT Administration'
    assert request.role == 'admin'


@pytest.mark.parametrize(
    ('overrides', 'message'),
    [
        ({'email': ''}, 'Please fill in all required fields'),
        ({'email': 'not-an-email'}, 'Please enter a valid email address'),
        ({'password': '12345'}, 'Password must be at least 6 characters'),
        ({'full_name': '  '}, 'Please fill in all required fields'),
        ({'role': 'student'}, 'New accounts may only be created as admin or super admin'),
    ],
)
def test_create_admin_rejects_invalid_forms(table_client, super_admin_user, db_session, overrides: dict, message: str) -> None:
    result = UserDirectoryController(table_client, super_admin_user).create_admin({**VALID_FORM, **overrides}, confirmed=True)

    assert not result.success
    assert result.alert.message == message
    assert db_session.query(User).count() == 0


def test_create_admin_request_error_is_pydantic_validation_error() -> None:
    with pytest.raises(ValidationError):
        CreateAdminRequest(email='x@y.com', full_name='X', password='1')


def test_create_admin_inserts_user_and_admin_info(table_client, super_admin_user, db_session) -> None:
    result = UserDirectoryController(table_client, super_admin_user).create_admin(dict(VALID_FORM), confirmed=True)

    assert result.success
    assert result.alert.message == 'Admin created successfully! Note: They need to use "Forgot Password" to set their password.'
    user = db_session.query(User).one()
    assert user.email == 'a@b.com'
    assert user.role == 'admin'
    assert user.uid.startswith('manual-')
    admin_info = db_session.query(AdminProfile).one()
    assert admin_info.user_uid == user.uid
    assert admin_info.full_name == 'Jane Doe'
    assert admin_info.department == 'IT Administration'
    assert re.fullmatch(r'ADMIN\d{6}', admin_info.staff_id)


def test_create_admin_unconfirmed_inserts_nothing(table_client, super_admin_user, db_session) -> None:
    result = UserDirectoryController(table_client, super_admin_user).create_admin(dict(VALID_FORM), confirmed=False)

    assert result.alert is None
    assert db_session.query(User).count() == 0


def test_create_admin_with_taken_email_reports_error(table_client, seed, super_admin_user, db_session) -> None:
    seed.user('existing', 'a@b.com', Role.STUDENT.value)

    result = UserDirectoryController(table_client, super_admin_user).create_admin(dict(VALID_FORM), confirmed=True)

    assert not result.success
    assert result.alert.kind.value == 'error'
    assert db_session.query(AdminProfile).count() == 0


def test_plain_admin_cannot_manage_accounts(table_client, directory_users, admin_user, db_session) -> None:
    controller = UserDirectoryController(table_client, admin_user)

    assert not controller.directory().can_manage
    assert controller.create_admin(dict(VALID_FORM), confirmed=True).alert.message == 'Super admin privileges required.'
    assert controller.change_role('s-1', 'admin', confirmed=True).alert.message == 'Super admin privileges required.'
    assert controller.delete_user('s-1', confirmed=True, confirmation='DELETE').alert.message == 'Super admin privileges required.'
    assert db_session.get(User, 's-1').role == 'student'


def test_directory_lists_names_and_counts(table_client, directory_users, super_admin_user) -> None:
    view = UserDirectoryController(table_client, super_admin_user).directory()

    assert view.can_manage
    assert [(row.email, row.full_name) for row in view.rows] == [
        ('alice@example.com', 'Alice Alum'),
        ('bob@example.com', 'Bob Student'),
        ('root@example.com', 'Root Admin'),
    ]
    assert view.counts == {'all': 3, 'alumni': 1, 'student': 1, 'admin': 1}


def test_directory_applies_role_filter_and_search(table_client, directory_users, super_admin_user) -> None:
    controller = UserDirectoryController(table_client, super_admin_user)

    assert [row.uid for row in controller.directory('student').rows] == ['s-1']
    assert [row.uid for row in controller.directory('all', 'ALUM').rows] == ['a-1']
    assert controller.directory('alumni', 'bob').rows == []


def test_user_detail_includes_role_specific_fields(table_client, directory_users, admin_user) -> None:
    detail = UserDirectoryController(table_client, admin_user).get_user_detail('a-1')
    labels = [label for label, _ in detail.fields]

    assert labels == ['Email', 'Role', 'User ID', 'Created At', 'Full Name', 'Course Code', 'Graduation Year', 'Verification Status']
    assert dict(detail.fields)['Created At'] == '03/10/2026, 12:00:00 am'
    assert not detail.can_manage


def test_change_role_requires_selection(table_client, directory_users, super_admin_user) -> None:
    result = UserDirectoryController(table_client, super_admin_user).change_role('s-1', '', confirmed=True)

    assert result.alert.message == 'Please select a role'


def test_change_role_updates_user(table_client, directory_users, super_admin_user, db_session) -> None:
    result = UserDirectoryController(table_client, super_admin_user).change_role('s-1', 'alumni', confirmed=True)

    assert result.alert.message == 'User role updated successfully!'
    assert db_session.get(User, 's-1').role == 'alumni'


def test_change_role_unconfirmed_is_silent(table_client, directory_users, super_admin_user, db_session) -> None:
    result = UserDirectoryController(table_client, super_admin_user).change_role('s-1', 'alumni', confirmed=False)

    assert result.alert is None
    assert db_session.get(User, 's-1').role == 'student'


def test_change_role_of_missing_user_reports_error(table_client, super_admin_user) -> None:
    result = UserDirectoryController(table_client, super_admin_user).change_role('ghost', 'admin', confirmed=True)

    assert result.alert.message == 'Error updating user role'


@pytest.mark.parametrize('confirmation', ['', 'delete', ' DELETE', 'DELETE ', None])
def test_delete_requires_exact_token(table_client, directory_users, super_admin_user, db_session, confirmation) -> None:
    result = UserDirectoryController(table_client, super_admin_user).delete_user('a-1', confirmed=True, confirmation=confirmation)

    assert result.alert.message == 'Deletion cancelled'
    assert db_session.get(User, 'a-1') is not None


def test_delete_removes_user_and_profile(table_client, directory_users, super_admin_user, db_session) -> None:
    result = UserDirectoryController(table_client, super_admin_user).delete_user('a-1', confirmed=True, confirmation='DELETE')

    assert result.success
    assert result.alert.message == 'User deleted successfully'
    assert db_session.get(User, 'a-1') is None
    assert db_session.query(AlumniProfile).count() == 0


def test_delete_missing_user_reports_error(table_client, super_admin_user) -> None:
    result = UserDirectoryController(table_client, super_admin_user).delete_user('ghost', confirmed=True, confirmation='DELETE')

    assert result.alert.message == 'Error deleting user. Please check if user has related data.'
