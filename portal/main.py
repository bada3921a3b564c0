import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from portal.core import config
from portal.core.exceptions import AuthorizationError
from portal.database import Base, engine, ensure_portal_schema
from portal.models import admin_info, alumni_profile, auth_session, inquiry, student_info, user  # noqa: F401
from portal.routes import alumni_routes, auth_routes, dashboard_routes, inquiry_routes, user_routes

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

logger = logging.getLogger(__name__)

config.validate_runtime_config()

app = FastAPI(title='Alumni Mentorship Admin Portal')


@app.on_event('startup')
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        ensure_portal_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.exception_handler(AuthorizationError)
def redirect_to_entry(request: Request, exc: AuthorizationError):
    logger.info('Redirecting %s to the entry page: %s', request.url.path, exc)
    response = RedirectResponse(
        f'{config.ENTRY_PAGE}?reason={exc.reason.value}',
        status_code=status.HTTP_303_SEE_OTHER,
    )
    response.delete_cookie(config.SESSION_COOKIE_NAME)
    return response


@app.get('/health')
def health():
    return {'status': 'Admin Portal Running'}


app.include_router(auth_routes.router)
app.include_router(dashboard_routes.router)
app.include_router(alumni_routes.router)
app.include_router(user_routes.router)
app.include_router(inquiry_routes.router)
