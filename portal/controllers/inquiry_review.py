import logging
from dataclasses import dataclass, field
from datetime import datetime

from portal.auth.authorizer import CurrentUser
from portal.controllers.lookups import resolve_display_names, resolve_emails
from portal.core.exceptions import BackendError
from portal.models.alumni_profile import AlumniProfile
from portal.models.inquiry import Inquiry, InquiryStatus
from portal.models.student_info import StudentProfile
from portal.rendering.alerts import Alert
from portal.rendering.markup import PLACEHOLDER
from portal.remote.tables import TableClient

logger = logging.getLogger(__name__)

UNKNOWN_STUDENT = "Unknown Student"
UNKNOWN_ALUMNI = "Unknown Alumni"
STATUS_FILTERS = ("all",) + tuple(status.value for status in InquiryStatus)


@dataclass
class InquiryRow:
    inquiry_id: int
    student_uid: str | None
    alumni_uid: str | None
    student_name: str
    alumni_name: str
    subject_area: str
    status: str | None
    created_at: datetime | None


@dataclass
class InquiryListView:
    status_filter: str
    search: str
    rows: list[InquiryRow] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=dict)
    alert: Alert | None = None


@dataclass
class PartyDetails:
    name: str
    email: str = PLACEHOLDER
    student_id: str = PLACEHOLDER
    course: str = PLACEHOLDER
    graduation_year: str = PLACEHOLDER


@dataclass
class InquiryDetailView:
    inquiry: Inquiry
    student: PartyDetails
    alumni: PartyDetails


def normalize_status_filter(value: str | None) -> str:
    value = (value or "").strip().lower()
    return value if value in STATUS_FILTERS else "all"


def filter_by_status(rows: list[InquiryRow], status_filter: str) -> list[InquiryRow]:
    active = normalize_status_filter(status_filter)
    if active == "all":
        return list(rows)
    return [row for row in rows if row.status == active]


def search_inquiries(rows: list[InquiryRow], term: str | None) -> list[InquiryRow]:
    needle = (term or "").strip().lower()
    if not needle:
        return list(rows)
    return [
        row for row in rows
        if needle in row.student_name.lower()
        or needle in row.alumni_name.lower()
        or needle in row.subject_area.lower()
    ]


class InquiryReviewController:
    """Read-only review of mentorship inquiries; status changes happen elsewhere."""

    def __init__(self, client: TableClient, current_user: CurrentUser):
        self.client = client
        self.current_user = current_user

    def load_inquiries(self, limit: int | None = None) -> list[InquiryRow]:
        inquiries = self.client.select(Inquiry, order_by=Inquiry.created_at, descending=True, limit=limit)
        student_names = resolve_display_names(
            self.client, StudentProfile, (inquiry.student_uid for inquiry in inquiries)
        )
        alumni_names = resolve_display_names(
            self.client, AlumniProfile, (inquiry.alumni_uid for inquiry in inquiries)
        )
        return [
            InquiryRow(
                inquiry_id=inquiry.inquiry_id,
                student_uid=inquiry.student_uid,
                alumni_uid=inquiry.alumni_uid,
                student_name=student_names.get(inquiry.student_uid, UNKNOWN_STUDENT),
                alumni_name=alumni_names.get(inquiry.alumni_uid, UNKNOWN_ALUMNI),
                subject_area=inquiry.subject_area or "",
                status=inquiry.status,
                created_at=inquiry.created_at,
            )
            for inquiry in inquiries
        ]

    def load_counts(self) -> dict[str, int]:
        counts = {"all": self.client.count(Inquiry)}
        for status in InquiryStatus:
            counts[status.value] = self.client.count(Inquiry, Inquiry.status == status.value)
        return counts

    def review(self, status_filter: str | None = None, search: str | None = None) -> InquiryListView:
        view = InquiryListView(status_filter=normalize_status_filter(status_filter), search=(search or "").strip())
        try:
            rows = self.load_inquiries()
            view.counts = self.load_counts()
        except BackendError:
            logger.exception("Error loading inquiries")
            view.alert = Alert.error("Error loading inquiries data")
            return view
        view.rows = search_inquiries(filter_by_status(rows, view.status_filter), view.search)
        return view

    def get_inquiry_detail(self, inquiry_id: int) -> InquiryDetailView | None:
        inquiry = self.client.maybe_single(Inquiry, inquiry_id=inquiry_id)
        if inquiry is None:
            return None

        emails = resolve_emails(self.client, [inquiry.student_uid, inquiry.alumni_uid])
        student = PartyDetails(name=UNKNOWN_STUDENT)
        alumni = PartyDetails(name=UNKNOWN_ALUMNI)

        student_info = self._lookup_profile(StudentProfile, inquiry.student_uid)
        if student_info is not None:
            student = PartyDetails(
                name=student_info.full_name or UNKNOWN_STUDENT,
                email=emails.get(inquiry.student_uid, PLACEHOLDER),
                student_id=student_info.student_id or PLACEHOLDER,
                course=student_info.course_code or PLACEHOLDER,
            )

        alumni_info = self._lookup_profile(AlumniProfile, inquiry.alumni_uid)
        if alumni_info is not None:
            alumni = PartyDetails(
                name=alumni_info.full_name or UNKNOWN_ALUMNI,
                email=emails.get(inquiry.alumni_uid, PLACEHOLDER),
                course=alumni_info.course_code or PLACEHOLDER,
                graduation_year=str(alumni_info.graduation_year or PLACEHOLDER),
            )

        return InquiryDetailView(inquiry=inquiry, student=student, alumni=alumni)

    def _lookup_profile(self, model, user_uid: str | None):
        if not user_uid:
            return None
        try:
            return self.client.maybe_single(model, user_uid=user_uid)
        except BackendError:
            logger.exception("Error fetching %s for %s", model.__tablename__, user_uid)
            return None
