"""Batch resolution of user ids to display names.

Lists resolve every foreign key of a page in one query per profile table,
never one query per row. A failed lookup is logged and yields an empty
mapping so callers fall back to their placeholder name.
"""

import logging
from typing import Iterable, assert_never

from portal.core.exceptions import BackendError
from portal.models.admin_info import AdminProfile
from portal.models.alumni_profile import AlumniProfile
from portal.models.student_info import StudentProfile
from portal.models.user import Role, User
from portal.remote.tables import TableClient

logger = logging.getLogger(__name__)


def profile_model_for(role: Role):
    match role:
        case Role.ALUMNI:
            return AlumniProfile
        case Role.STUDENT:
            return StudentProfile
        case Role.ADMIN | Role.SUPER_ADMIN:
            return AdminProfile
        case _:
            assert_never(role)


def resolve_display_names(client: TableClient, model, user_uids: Iterable[str]) -> dict[str, str]:
    try:
        rows = client.select_in(model, "user_uid", user_uids)
    except BackendError:
        logger.exception("Name lookup in %s failed", model.__tablename__)
        return {}
    return {row.user_uid: row.full_name for row in rows if row.full_name}


def resolve_emails(client: TableClient, user_uids: Iterable[str]) -> dict[str, str]:
    try:
        rows = client.select_in(User, "uid", user_uids)
    except BackendError:
        logger.exception("Email lookup failed")
        return {}
    return {row.uid: row.email for row in rows}


def resolve_user_names(client: TableClient, users: Iterable[User]) -> dict[str, str]:
    """Map each user's uid to the full name stored in its role's profile table."""
    uids_by_model: dict = {}
    for user in users:
        role = Role.from_value(user.role)
        if role is None:
            logger.debug("User %s has unrecognized role %r", user.uid, user.role)
            continue
        uids_by_model.setdefault(profile_model_for(role), set()).add(user.uid)

    names: dict[str, str] = {}
    for model, uids in uids_by_model.items():
        names.update(resolve_display_names(client, model, uids))
    return names
