"""Decides whether a signed-in identity may use the admin console."""

import logging
import time
from dataclasses import dataclass
from enum import Enum

from portal.core import config
from portal.core.exceptions import BackendError, RecordNotFoundError
from portal.models.admin_info import AdminProfile
from portal.models.user import Role, User
from portal.remote.tables import TableClient

logger = logging.getLogger(__name__)


class RejectionReason(str, Enum):
    NO_SESSION = "no_session"
    ACCOUNT_NOT_FOUND = "account_not_found"
    INSUFFICIENT_PRIVILEGE = "insufficient_privilege"
    LOOKUP_FAILED = "lookup_failed"

    @property
    def message(self) -> str:
        return REJECTION_MESSAGES[self]


REJECTION_MESSAGES = {
    RejectionReason.NO_SESSION: "Please sign in to continue.",
    RejectionReason.ACCOUNT_NOT_FOUND: "Account not found. Please contact Super Admin to create your account.",
    RejectionReason.INSUFFICIENT_PRIVILEGE: "Access denied. Admin privileges required.",
    RejectionReason.LOOKUP_FAILED: "Failed to access user record. Please contact support.",
}


@dataclass(frozen=True)
class CurrentUser:
    """Merged identity of the signed-in admin, cached for one page load."""

    uid: str
    email: str
    role: Role
    full_name: str | None = None
    staff_id: str | None = None
    department: str | None = None

    @property
    def is_super_admin(self) -> bool:
        return self.role is Role.SUPER_ADMIN

    @property
    def display_name(self) -> str:
        return self.email.split("@")[0]

    @property
    def role_label(self) -> str:
        return self.role.label

    @property
    def avatar_initial(self) -> str:
        return self.email[:1].upper()


@dataclass(frozen=True)
class AuthorizationResult:
    granted: bool
    profile: CurrentUser | None = None
    reason: RejectionReason | None = None

    @classmethod
    def reject(cls, reason: RejectionReason) -> "AuthorizationResult":
        return cls(granted=False, reason=reason)

    @property
    def message(self) -> str | None:
        return self.reason.message if self.reason else None


def generate_staff_id() -> str:
    return "ADMIN" + str(int(time.time() * 1000))[-6:]


class RoleAuthorizer:
    """Looks up the account behind a session and gates it on the admin roles.

    The first time an admin-tier account is authorized its ``admin_info`` row
    is created. ``users`` rows are never created here: an identity without one
    is rejected with ``ACCOUNT_NOT_FOUND`` so the person knows to ask a super
    admin rather than retry.
    """

    def __init__(self, client: TableClient):
        self.client = client

    def authorize(self, user_id: str, email: str | None = None, full_name: str | None = None) -> AuthorizationResult:
        try:
            user = self.client.single(User, uid=user_id)
        except RecordNotFoundError:
            logger.info("No account row for identity %s", user_id)
            return AuthorizationResult.reject(RejectionReason.ACCOUNT_NOT_FOUND)
        except BackendError:
            logger.exception("Role verification failed for %s", user_id)
            return AuthorizationResult.reject(RejectionReason.LOOKUP_FAILED)

        role = Role.from_value(user.role)
        if role is None or not role.is_admin_tier:
            logger.info("Identity %s with role %r is not an admin", user_id, user.role)
            return AuthorizationResult.reject(RejectionReason.INSUFFICIENT_PRIVILEGE)

        try:
            admin_info = self.client.maybe_single(AdminProfile, user_uid=user_id)
            if admin_info is None:
                admin_info = self._provision_admin_info(user, full_name)
        except BackendError:
            logger.exception("Could not load or create admin profile for %s", user_id)
            return AuthorizationResult.reject(RejectionReason.LOOKUP_FAILED)

        return AuthorizationResult(
            granted=True,
            profile=CurrentUser(
                uid=user.uid,
                email=user.email or email or "",
                role=role,
                full_name=admin_info.full_name,
                staff_id=admin_info.staff_id,
                department=admin_info.department,
            ),
        )

    def _provision_admin_info(self, user: User, full_name: str | None) -> AdminProfile:
        (admin_info,) = self.client.insert(
            AdminProfile(
                user_uid=user.uid,
                staff_id=generate_staff_id(),
                full_name=full_name or user.email.split("@")[0],
                department=config.DEFAULT_ADMIN_DEPARTMENT,
            )
        )
        logger.info("Created admin profile %s for %s", admin_info.staff_id, user.email)
        return admin_info
