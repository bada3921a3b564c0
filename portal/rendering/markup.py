"""Pure helpers that turn record fields into HTML fragments.

Every helper escapes its input and returns ``Markup`` so templates can
embed the result without double escaping. Absent optional values render as
an explicit placeholder, which keeps detail layouts identical across records.
"""

from datetime import datetime
from typing import Iterable

from markupsafe import Markup, escape

from portal.models.inquiry import InquiryStatus
from portal.models.user import Role

PLACEHOLDER = "N/A"
CAPSTONE_PREVIEW_LENGTH = 40

STATUS_BADGE_CLASSES = {
    InquiryStatus.PENDING: "badge-warning",
    InquiryStatus.ACCEPTED: "badge-success",
    InquiryStatus.DECLINED: "badge-danger",
    InquiryStatus.COMPLETED: "badge-info",
}

ROLE_BADGE_CLASSES = {
    Role.ALUMNI: "badge-success",
    Role.STUDENT: "badge-info",
    Role.ADMIN: "badge-warning",
    Role.SUPER_ADMIN: "badge-danger",
}


def or_placeholder(value, placeholder: str = PLACEHOLDER) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        return placeholder
    return str(value)


def badge(label: str, css_class: str | None = None) -> Markup:
    classes = f"badge {css_class}" if css_class else "badge"
    return Markup('<span class="{}">{}</span>').format(classes, label)


def status_badge(status: str | None) -> Markup:
    parsed = InquiryStatus.from_value(status)
    if parsed is None:
        return badge("Unknown")
    return badge(parsed.value.capitalize(), STATUS_BADGE_CLASSES[parsed])


def role_badge(role: str | Role | None) -> Markup:
    parsed = role if isinstance(role, Role) else Role.from_value(role)
    if parsed is None:
        return badge("Unknown")
    return badge(parsed.label, ROLE_BADGE_CLASSES[parsed])


def verification_badge(is_verified: bool | None) -> Markup:
    if is_verified:
        return badge("Verified", "badge-success")
    return badge("Pending", "badge-warning")


def format_date(value: datetime | None) -> str:
    if value is None:
        return PLACEHOLDER
    return f"{value.day} {value:%b %Y}"


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return PLACEHOLDER
    hour = value.hour % 12 or 12
    meridiem = "am" if value.hour < 12 else "pm"
    return f"{value:%d/%m/%Y}, {hour}:{value:%M:%S} {meridiem}"


def truncate(value: str | None, length: int = CAPSTONE_PREVIEW_LENGTH) -> str:
    if not value:
        return PLACEHOLDER
    return value[:length] + "..."


def _experience_entry(heading: Markup, subtitle: str, description: str | None) -> Markup:
    entry = Markup('<div class="experience-entry">{}<br><small class="text-secondary">{}</small>').format(
        heading, subtitle
    )
    if description:
        entry += Markup('<p class="experience-description">{}</p>').format(description)
    return entry + Markup("</div>")


def _position_heading(entry: dict) -> Markup:
    return Markup("<strong>{}</strong> at {}").format(
        or_placeholder(entry.get("position")), or_placeholder(entry.get("company"))
    )


def render_career_timeline(timeline: list[dict] | None) -> Markup:
    if not timeline:
        return Markup("No career information")
    return Markup("").join(
        _experience_entry(
            _position_heading(job),
            f"{or_placeholder(job.get('start_date'))} - {job.get('end_date') or 'Present'}",
            job.get("description"),
        )
        for job in timeline
    )


def render_internships(internships: list[dict] | None) -> Markup:
    if not internships:
        return Markup("No internship information")
    return Markup("").join(
        _experience_entry(
            _position_heading(intern),
            f"{or_placeholder(intern.get('duration'))} • {or_placeholder(intern.get('year'))}",
            intern.get("description"),
        )
        for intern in internships
    )


def render_skills(skills: Iterable[str] | None) -> Markup:
    tags = [skill for skill in (skills or []) if skill]
    if not tags:
        return Markup("<span>None specified</span>")
    return Markup("").join(Markup('<span class="skill-tag">{}</span>').format(skill) for skill in tags)


def detail_field(label: str, value, css_prefix: str = "detail") -> Markup:
    rendered = value if isinstance(value, Markup) else escape(or_placeholder(value))
    return Markup(
        '<div class="{prefix}"><div class="{prefix}-label">{label}</div>'
        '<div class="{prefix}-value">{value}</div></div>'
    ).format(prefix=css_prefix, label=label, value=rendered)


TEMPLATE_HELPERS = {
    "or_placeholder": or_placeholder,
    "status_badge": status_badge,
    "role_badge": role_badge,
    "verification_badge": verification_badge,
    "format_date": format_date,
    "format_timestamp": format_timestamp,
    "truncate_text": truncate,
    "render_career_timeline": render_career_timeline,
    "render_internships": render_internships,
    "render_skills": render_skills,
    "detail_field": detail_field,
}
