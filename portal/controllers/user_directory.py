"""User directory: browsing accounts and the super-admin account actions."""

import logging
import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import assert_never

from pydantic import BaseModel, Field, ValidationError, field_validator

from portal.auth.authorizer import CurrentUser, generate_staff_id
from portal.controllers.lookups import profile_model_for, resolve_user_names
from portal.core import config
from portal.core.exceptions import BackendError, PermissionDeniedError, RecordNotFoundError
from portal.models.admin_info import AdminProfile
from portal.models.user import Role, User
from portal.rendering.alerts import Alert
from portal.rendering.markup import PLACEHOLDER, format_timestamp, role_badge, verification_badge
from portal.remote.tables import TableClient

logger = logging.getLogger(__name__)

ROLE_FILTERS: dict[str, frozenset[Role] | None] = {
    "all": None,
    "alumni": frozenset({Role.ALUMNI}),
    "student": frozenset({Role.STUDENT}),
    "admin": frozenset({Role.ADMIN, Role.SUPER_ADMIN}),
}
CREATABLE_ROLES = (Role.ADMIN, Role.SUPER_ADMIN)
REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"
SUPER_ADMIN_REQUIRED_MESSAGE = "Super admin privileges required."
_BASE36 = string.digits + string.ascii_lowercase


@dataclass
class UserRow:
    uid: str
    email: str
    role: str
    full_name: str
    created_at: datetime | None


@dataclass
class DirectoryView:
    role_filter: str
    search: str
    can_manage: bool
    rows: list[UserRow] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=dict)
    alert: Alert | None = None
    show_create_form: bool = False
    create_form: dict = field(default_factory=dict)


@dataclass
class UserDetailView:
    user: User
    fields: list[tuple[str, object]]
    can_manage: bool
    role_options: tuple[Role, ...] = tuple(Role)


@dataclass(frozen=True)
class ActionResult:
    alert: Alert | None
    success: bool = False


class CreateAdminRequest(BaseModel):
    email: str
    full_name: str
    password: str
    department: str = Field(default="", validate_default=True)
    role: str = Role.ADMIN.value

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError(REQUIRED_FIELDS_MESSAGE)
        if "@" not in normalized:
            raise ValueError("Please enter a valid email address")
        return normalized

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError(REQUIRED_FIELDS_MESSAGE)
        return normalized

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise ValueError(REQUIRED_FIELDS_MESSAGE)
        if len(value) < config.MIN_ADMIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {config.MIN_ADMIN_PASSWORD_LENGTH} characters")
        return value

    @field_validator("department")
    @classmethod
    def validate_department(cls, value: str) -> str:
        return value.strip() or config.DEFAULT_ADMIN_DEPARTMENT

    @field_validator("role")
    @classmethod
    def validate_role(cls, value: str) -> str:
        role = Role.from_value(value)
        if role not in CREATABLE_ROLES:
            raise ValueError("New accounts may only be created as admin or super admin")
        return role.value


def first_error_message(exc: ValidationError) -> str:
    error = exc.errors()[0]
    cause = (error.get("ctx") or {}).get("error")
    return str(cause) if cause else error["msg"]


def generate_manual_uid() -> str:
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"manual-{int(time.time() * 1000)}-{suffix}"


def normalize_role_filter(value: str | None) -> str:
    value = (value or "").strip().lower()
    return value if value in ROLE_FILTERS else "all"


def filter_by_role(rows: list[UserRow], role_filter: str) -> list[UserRow]:
    roles = ROLE_FILTERS[normalize_role_filter(role_filter)]
    if roles is None:
        return list(rows)
    return [row for row in rows if Role.from_value(row.role) in roles]


def search_users(rows: list[UserRow], term: str | None) -> list[UserRow]:
    needle = (term or "").strip().lower()
    if not needle:
        return list(rows)
    return [
        row for row in rows
        if needle in row.email.lower() or needle in row.full_name.lower()
    ]


class UserDirectoryController:
    def __init__(self, client: TableClient, current_user: CurrentUser):
        self.client = client
        self.current_user = current_user

    @property
    def can_manage(self) -> bool:
        return self.current_user.is_super_admin

    def _require_super_admin(self) -> None:
        if not self.can_manage:
            raise PermissionDeniedError(SUPER_ADMIN_REQUIRED_MESSAGE)

    def load_users(self) -> list[UserRow]:
        users = self.client.select(User, order_by=User.created_at, descending=True)
        names = resolve_user_names(self.client, users)
        return [
            UserRow(
                uid=user.uid,
                email=user.email,
                role=user.role,
                full_name=names.get(user.uid, PLACEHOLDER),
                created_at=user.created_at,
            )
            for user in users
        ]

    def load_counts(self) -> dict[str, int]:
        return {
            "all": self.client.count(User),
            "alumni": self.client.count(User, User.role == Role.ALUMNI.value),
            "student": self.client.count(User, User.role == Role.STUDENT.value),
            "admin": self.client.count(User, User.role.in_([Role.ADMIN.value, Role.SUPER_ADMIN.value])),
        }

    def directory(self, role_filter: str | None = None, search: str | None = None, alert: Alert | None = None) -> DirectoryView:
        view = DirectoryView(
            role_filter=normalize_role_filter(role_filter),
            search=(search or "").strip(),
            can_manage=self.can_manage,
            alert=alert,
        )
        try:
            rows = self.load_users()
            view.counts = self.load_counts()
        except BackendError:
            logger.exception("Error loading users")
            view.alert = Alert.error("Error loading users data")
            return view
        view.rows = search_users(filter_by_role(rows, view.role_filter), view.search)
        return view

    def get_user_detail(self, user_id: str) -> UserDetailView:
        user = self.client.single(User, uid=user_id)
        fields: list[tuple[str, object]] = [
            ("Email", user.email),
            ("Role", role_badge(user.role)),
            ("User ID", user.uid),
            ("Created At", format_timestamp(user.created_at)),
        ]
        role = Role.from_value(user.role)
        if role is not None:
            profile = self.client.maybe_single(profile_model_for(role), user_uid=user.uid)
            if profile is not None:
                fields.extend(self._profile_fields(role, profile))
        return UserDetailView(user=user, fields=fields, can_manage=self.can_manage)

    def _profile_fields(self, role: Role, profile) -> list[tuple[str, object]]:
        match role:
            case Role.ALUMNI:
                return [
                    ("Full Name", profile.full_name),
                    ("Course Code", profile.course_code),
                    ("Graduation Year", profile.graduation_year),
                    ("Verification Status", verification_badge(profile.is_verified)),
                ]
            case Role.STUDENT:
                return [
                    ("Full Name", profile.full_name),
                    ("Student ID", profile.student_id),
                    ("Course Code", profile.course_code),
                ]
            case Role.ADMIN | Role.SUPER_ADMIN:
                return [
                    ("Full Name", profile.full_name),
                    ("Staff ID", profile.staff_id),
                    ("Department", profile.department),
                ]
            case _:
                assert_never(role)

    def change_role(self, user_id: str, new_role: str | None, confirmed: bool) -> ActionResult:
        try:
            self._require_super_admin()
        except PermissionDeniedError as exc:
            return ActionResult(Alert.error(str(exc)))
        if not (new_role or "").strip():
            return ActionResult(Alert.error("Please select a role"))
        role = Role.from_value(new_role)
        if role is None:
            return ActionResult(Alert.error("Please select a role"))
        if not confirmed:
            return ActionResult(None)

        try:
            if not self.client.update(User, {"role": role.value}, uid=user_id):
                raise RecordNotFoundError(User.__tablename__, {"uid": user_id})
        except BackendError:
            logger.exception("Error updating role of %s", user_id)
            return ActionResult(Alert.error("Error updating user role"))
        logger.info("%s changed role of %s to %s", self.current_user.email, user_id, role.value)
        return ActionResult(Alert.success("User role updated successfully!"), success=True)

    def delete_user(self, user_id: str, confirmed: bool, confirmation: str | None) -> ActionResult:
        try:
            self._require_super_admin()
        except PermissionDeniedError as exc:
            return ActionResult(Alert.error(str(exc)))
        if not confirmed:
            return ActionResult(None)
        if confirmation != config.DELETE_CONFIRMATION_TOKEN:
            return ActionResult(Alert.error("Deletion cancelled"))

        try:
            if not self.client.delete(User, uid=user_id):
                raise RecordNotFoundError(User.__tablename__, {"uid": user_id})
        except BackendError:
            logger.exception("Error deleting user %s", user_id)
            return ActionResult(Alert.error("Error deleting user. Please check if user has related data."))
        logger.info("%s deleted user %s", self.current_user.email, user_id)
        return ActionResult(Alert.success("User deleted successfully"), success=True)

    def create_admin(self, form: dict, confirmed: bool) -> ActionResult:
        """Insert a users row and its admin_info row without an identity-provider account.

        The new account has no password; its owner signs in through single
        sign-on or a password reset.
        """
        try:
            self._require_super_admin()
        except PermissionDeniedError as exc:
            return ActionResult(Alert.error(str(exc)))
        try:
            request = CreateAdminRequest(**form)
        except ValidationError as exc:
            return ActionResult(Alert.error(first_error_message(exc)))
        if not confirmed:
            return ActionResult(None)

        user_id = generate_manual_uid()
        try:
            self.client.insert(
                User(uid=user_id, email=request.email, role=request.role),
                AdminProfile(
                    user_uid=user_id,
                    staff_id=generate_staff_id(),
                    full_name=request.full_name,
                    department=request.department,
                ),
            )
        except BackendError:
            logger.exception("Error creating admin %s", request.email)
            return ActionResult(Alert.error("Error: could not create the admin account. The email may already be registered."))
        logger.info("%s created %s account %s", self.current_user.email, request.role, request.email)
        return ActionResult(
            Alert.success('Admin created successfully! Note: They need to use "Forgot Password" to set their password.'),
            success=True,
        )
