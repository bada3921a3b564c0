import logging
from dataclasses import dataclass, field

from portal.auth.authorizer import CurrentUser
from portal.controllers.alumni_review import AlumniRow
from portal.controllers.inquiry_review import InquiryReviewController, InquiryRow
from portal.controllers.lookups import resolve_emails
from portal.core import config
from portal.core.exceptions import BackendError
from portal.models.alumni_profile import AlumniProfile
from portal.models.inquiry import Inquiry
from portal.models.user import User
from portal.remote.tables import TableClient

logger = logging.getLogger(__name__)


@dataclass
class DashboardView:
    counters: dict[str, int | None] = field(default_factory=dict)
    recent_alumni: list[AlumniRow] | None = None
    recent_inquiries: list[InquiryRow] | None = None


class DashboardController:
    """Read-only overview. Each section loads on its own; a failed one is left as ``None``."""

    def __init__(self, client: TableClient, current_user: CurrentUser):
        self.client = client
        self.current_user = current_user

    def _count(self, label: str, model, *criteria) -> int | None:
        try:
            return self.client.count(model, *criteria)
        except BackendError:
            logger.exception("Error loading %s counter", label)
            return None

    def load_counters(self) -> dict[str, int | None]:
        return {
            "total_users": self._count("total users", User),
            "verified_alumni": self._count("verified alumni", AlumniProfile, AlumniProfile.is_verified.is_(True)),
            "pending_alumni": self._count("pending alumni", AlumniProfile, AlumniProfile.is_verified.is_(False)),
            "total_inquiries": self._count("total inquiries", Inquiry),
        }

    def load_recent_alumni(self) -> list[AlumniRow] | None:
        try:
            profiles = self.client.select(
                AlumniProfile,
                order_by=AlumniProfile.created_at,
                descending=True,
                limit=config.RECENT_ACTIVITY_LIMIT,
            )
        except BackendError:
            logger.exception("Error loading recent alumni")
            return None
        emails = resolve_emails(self.client, (profile.user_uid for profile in profiles))
        return [AlumniRow(profile, emails.get(profile.user_uid)) for profile in profiles]

    def load_recent_inquiries(self) -> list[InquiryRow] | None:
        try:
            return InquiryReviewController(self.client, self.current_user).load_inquiries(
                limit=config.RECENT_ACTIVITY_LIMIT
            )
        except BackendError:
            logger.exception("Error loading recent inquiries")
            return None

    def overview(self) -> DashboardView:
        return DashboardView(
            counters=self.load_counters(),
            recent_alumni=self.load_recent_alumni(),
            recent_inquiries=self.load_recent_inquiries(),
        )
