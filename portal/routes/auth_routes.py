import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import RedirectResponse, Response

from portal.auth.authorizer import RejectionReason
from portal.auth.dependencies import get_session_gateway
from portal.auth.session import LoginResult, SessionGateway
from portal.core import config
from portal.core.exceptions import AuthenticationError
from portal.rendering.alerts import Alert
from portal.rendering.templates import render_page

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


async def prepare_sso_request(request: Request) -> dict:
    form_data = await request.form()
    host = request.headers.get('host', '')
    https = request.url.scheme == 'https'
    _, _, port = host.partition(':')
    return {
        'https': 'on' if https else 'off',
        'http_host': host,
        'server_port': port or ('443' if https else '80'),
        'script_name': request.url.path,
        'get_data': dict(request.query_params),
        'post_data': dict(form_data),
    }


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        config.SESSION_COOKIE_NAME,
        token,
        max_age=config.SESSION_EXPIRES_MINUTES * 60,
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite='lax',
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(config.SESSION_COOKIE_NAME)


def reason_alert(reason: str | None) -> Alert | None:
    try:
        return Alert.error(RejectionReason(reason).message) if reason else None
    except ValueError:
        return None


def login_page(request: Request, alert: Alert | None = None, status_code: int = status.HTTP_200_OK):
    response = render_page(request, 'login.html', alert=alert, status_code=status_code)
    clear_session_cookie(response)
    return response


def login_redirect(result: LoginResult, request: Request):
    if result.success:
        response = RedirectResponse(config.DASHBOARD_PAGE, status_code=status.HTTP_303_SEE_OTHER)
        set_session_cookie(response, result.token)
        return response
    return login_page(request, Alert.error(result.error), status_code=status.HTTP_401_UNAUTHORIZED)


@router.get('/')
def entry(request: Request, reason: str | None = None, gateway: SessionGateway = Depends(get_session_gateway)):
    session = gateway.get_current_session()
    if session is not None and gateway.authorize_session(session).granted:
        return RedirectResponse(config.DASHBOARD_PAGE, status_code=status.HTTP_303_SEE_OTHER)
    alert = reason_alert(reason)
    if alert is None and gateway.rejection is not None:
        alert = Alert.error(gateway.rejection.message)
    return login_page(request, alert)


@router.post('/login')
def login(
    request: Request,
    email: str = Form(''),
    password: str = Form(''),
    gateway: SessionGateway = Depends(get_session_gateway),
):
    email = email.strip()
    if not email or not password:
        return login_page(
            request,
            Alert.error('Please enter both email and password'),
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return login_redirect(gateway.login(email, password), request)


@router.get('/sso/login')
async def sso_login(request: Request, gateway: SessionGateway = Depends(get_session_gateway)):
    request_data = await prepare_sso_request(request)
    try:
        redirect_url = gateway.login_with_oauth(config.SSO_PROVIDER_NAME, request_data)
    except AuthenticationError as exc:
        return login_page(request, Alert.error(str(exc)), status_code=status.HTTP_400_BAD_REQUEST)
    except Exception:
        logger.exception('Single sign-on redirect failed')
        return login_page(
            request,
            Alert.error('Single sign-on failed. Please try again.'),
            status_code=status.HTTP_502_BAD_GATEWAY,
        )
    return RedirectResponse(url=redirect_url)


@router.post('/sso/acs')
async def sso_acs(request: Request, gateway: SessionGateway = Depends(get_session_gateway)):
    request_data = await prepare_sso_request(request)
    result = gateway.complete_oauth(request_data)
    if not result.success and result.reason is not None:
        response = RedirectResponse(
            f'{config.ENTRY_PAGE}?reason={result.reason.value}',
            status_code=status.HTTP_303_SEE_OTHER,
        )
        clear_session_cookie(response)
        return response
    return login_redirect(result, request)


@router.get('/sso/metadata')
def sso_metadata():
    from portal.auth import saml

    metadata, errors = saml.generate_sp_metadata()
    if errors:
        raise HTTPException(status_code=500, detail={'metadata_errors': errors})
    return Response(content=metadata, media_type='application/xml')


@router.post('/logout')
def logout(gateway: SessionGateway = Depends(get_session_gateway)):
    target = gateway.logout() or config.ENTRY_PAGE
    response = RedirectResponse(target, status_code=status.HTTP_303_SEE_OTHER)
    clear_session_cookie(response)
    return response
