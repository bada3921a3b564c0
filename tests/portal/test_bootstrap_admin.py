import getpass

import pytest

from portal.auth.passwords import verify_password
from portal.bootstrap_admin import create_super_admin, main
from portal.models.admin_info import AdminProfile
from portal.models.user import Role


def test_create_super_admin_inserts_account_with_password(table_client, db_session) -> None:
    account = create_super_admin(table_client, ' Root@Example.com ', ' Root Admin ', 'secret1', 'IT Administration')

    assert account.email == 'root@example.com'
    assert account.role == Role.SUPER_ADMIN.value
    assert verify_password('secret1', account.hashed_password)
    admin_info = db_session.query(AdminProfile).filter_by(user_uid=account.uid).one()
    assert admin_info.full_name == 'Root Admin'


def test_create_super_admin_refuses_existing_email(table_client, seed) -> None:
    seed.admin(email='root@example.com')

    with pytest.raises(ValueError, match='already exists'):
        create_super_admin(table_client, 'root@example.com', 'Root', 'secret1', 'IT Administration')


def test_create_super_admin_enforces_password_length(table_client) -> None:
    with pytest.raises(ValueError, match='at least 6 characters'):
        create_super_admin(table_client, 'root@example.com', 'Root', '123', 'IT Administration')


def test_main_exits_when_passwords_differ(monkeypatch) -> None:
    answers = iter(['secret1', 'secret2'])
    monkeypatch.setattr(getpass, 'getpass', lambda prompt: next(answers))

    with pytest.raises(SystemExit) as exception_info:
        main(['root@example.com', 'Root Admin'])

    assert exception_info.value.code == 1
