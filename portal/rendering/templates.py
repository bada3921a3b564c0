from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from portal.auth.authorizer import CurrentUser
from portal.core import config
from portal.rendering.alerts import render_alert
from portal.rendering.markup import TEMPLATE_HELPERS

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals.update(TEMPLATE_HELPERS)
templates.env.globals.update(
    render_alert=render_alert,
    delete_confirmation_token=config.DELETE_CONFIRMATION_TOKEN,
    default_admin_department=config.DEFAULT_ADMIN_DEPARTMENT,
    min_admin_password_length=config.MIN_ADMIN_PASSWORD_LENGTH,
)


def render_page(
    request: Request,
    template_name: str,
    current_user: CurrentUser | None = None,
    status_code: int = 200,
    **context,
):
    return templates.TemplateResponse(
        request,
        template_name,
        {"current_user": current_user, **context},
        status_code=status_code,
    )
