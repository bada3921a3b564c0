"""Create the first super admin account, with a password for email sign-in.

Usage:
    python -m portal.bootstrap_admin EMAIL FULL_NAME [--department NAME]

The password is read interactively so it never lands in shell history.
"""
import argparse
import getpass
import sys
import uuid

from portal.auth.authorizer import generate_staff_id
from portal.auth.passwords import hash_password
from portal.core import config
from portal.core.exceptions import BackendError
from portal.database import Base, SessionLocal, engine, ensure_portal_schema
from portal.models import admin_info, alumni_profile, auth_session, inquiry, student_info  # noqa: F401
from portal.models.admin_info import AdminProfile
from portal.models.user import Role, User
from portal.remote.tables import TableClient


def create_super_admin(client: TableClient, email: str, full_name: str, password: str, department: str) -> User:
    normalized = email.strip().lower()
    if client.maybe_single(User, email=normalized) is not None:
        raise ValueError(f"An account for {normalized} already exists.")
    if len(password) < config.MIN_ADMIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {config.MIN_ADMIN_PASSWORD_LENGTH} characters")

    user_uid = str(uuid.uuid4())
    account, _ = client.insert(
        User(
            uid=user_uid,
            email=normalized,
            role=Role.SUPER_ADMIN.value,
            hashed_password=hash_password(password),
        ),
        AdminProfile(
            user_uid=user_uid,
            staff_id=generate_staff_id(),
            full_name=full_name.strip(),
            department=department,
        ),
    )
    return account


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create a super admin account.")
    parser.add_argument("email")
    parser.add_argument("full_name")
    parser.add_argument("--department", default=config.DEFAULT_ADMIN_DEPARTMENT)
    args = parser.parse_args(argv)

    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Confirm password: "):
        print("Passwords do not match.", file=sys.stderr)
        sys.exit(1)

    Base.metadata.create_all(bind=engine)
    ensure_portal_schema()
    db = SessionLocal()
    try:
        account = create_super_admin(TableClient(db), args.email, args.full_name, password, args.department)
        print(f"Created super admin {account.email} ({account.uid})")
    except (ValueError, BackendError) as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
