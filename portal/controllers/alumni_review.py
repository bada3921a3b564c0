import logging
from dataclasses import dataclass, field

from portal.auth.authorizer import CurrentUser
from portal.controllers.lookups import resolve_emails
from portal.core.exceptions import BackendError, RecordNotFoundError
from portal.models.alumni_profile import AlumniProfile
from portal.rendering.alerts import Alert
from portal.remote.tables import TableClient

logger = logging.getLogger(__name__)

VERIFICATION_FILTERS = ("pending", "verified", "all")
DEFAULT_FILTER = "pending"


@dataclass
class AlumniRow:
    profile: AlumniProfile
    email: str | None


@dataclass
class AlumniListView:
    filter: str
    rows: list[AlumniRow] = field(default_factory=list)
    pending_count: int = 0
    verified_count: int = 0
    alert: Alert | None = None


def normalize_filter(value: str | None) -> str:
    value = (value or "").strip().lower()
    return value if value in VERIFICATION_FILTERS else DEFAULT_FILTER


class AlumniReviewController:
    """Lists alumni submissions by verification state and toggles verification."""

    def __init__(self, client: TableClient, current_user: CurrentUser):
        self.client = client
        self.current_user = current_user

    def _criteria(self, verification_filter: str) -> list:
        if verification_filter == "pending":
            return [AlumniProfile.is_verified.is_(False)]
        if verification_filter == "verified":
            return [AlumniProfile.is_verified.is_(True)]
        return []

    def list_alumni(self, verification_filter: str | None = None, alert: Alert | None = None) -> AlumniListView:
        active = normalize_filter(verification_filter)
        view = AlumniListView(filter=active, alert=alert)
        try:
            profiles = self.client.select(
                AlumniProfile,
                *self._criteria(active),
                order_by=AlumniProfile.created_at,
                descending=True,
            )
            emails = resolve_emails(self.client, (profile.user_uid for profile in profiles))
            view.rows = [AlumniRow(profile, emails.get(profile.user_uid)) for profile in profiles]
            view.pending_count = self.client.count(AlumniProfile, AlumniProfile.is_verified.is_(False))
            view.verified_count = self.client.count(AlumniProfile, AlumniProfile.is_verified.is_(True))
        except BackendError:
            logger.exception("Error loading alumni with filter %s", active)
            view.alert = Alert.error("Error loading alumni data")
        return view

    def get_alumni(self, alumni_id: int) -> AlumniRow:
        profile = self.client.single(AlumniProfile, id=alumni_id)
        email = resolve_emails(self.client, [profile.user_uid]).get(profile.user_uid)
        return AlumniRow(profile, email)

    def set_verification(
        self,
        alumni_id: int,
        value: bool,
        confirmed: bool,
        verification_filter: str | None = None,
    ) -> AlumniListView:
        """Flip ``is_verified`` and re-fetch the active list; nothing changes unless confirmed."""
        if not confirmed:
            return self.list_alumni(verification_filter)

        if value:
            success, failure = "Alumni verified successfully!", "Error verifying alumni"
        else:
            success, failure = "Verification revoked successfully", "Error revoking verification"

        try:
            updated = self.client.update(AlumniProfile, {"is_verified": value}, id=alumni_id)
            if not updated:
                raise RecordNotFoundError(AlumniProfile.__tablename__, {"id": alumni_id})
        except BackendError:
            logger.exception("%s (alumni id %s)", failure, alumni_id)
            alert = Alert.error(failure)
        else:
            logger.info("%s set is_verified=%s on alumni %s", self.current_user.email, value, alumni_id)
            alert = Alert.success(success)
        return self.list_alumni(verification_filter, alert=alert)
