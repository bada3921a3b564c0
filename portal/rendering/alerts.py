"""Transient success/error banners."""

from dataclasses import dataclass
from enum import Enum

from markupsafe import Markup

from portal.core import config


class AlertKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Alert:
    message: str
    kind: AlertKind = AlertKind.ERROR

    @classmethod
    def success(cls, message: str) -> "Alert":
        return cls(message, AlertKind.SUCCESS)

    @classmethod
    def error(cls, message: str) -> "Alert":
        return cls(message, AlertKind.ERROR)

    @property
    def css_class(self) -> str:
        return f"alert-{self.kind.value}"


def render_alert(alert: Alert | None, dismiss_after_seconds: int | None = None) -> Markup:
    """Render a banner that the page script removes after the dismiss delay."""
    if not alert:
        return Markup("")
    seconds = config.ALERT_DISMISS_SECONDS if dismiss_after_seconds is None else dismiss_after_seconds
    return Markup(
        '<div class="alert {}" role="alert" data-dismiss-after="{}"><span>{}</span>'
        '<button type="button" class="alert-close" aria-label="Dismiss">&times;</button></div>'
    ).format(alert.css_class, seconds * 1000, alert.message)
