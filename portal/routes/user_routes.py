import logging

from fastapi import APIRouter, Depends, Form, Query, Request

from portal.auth.authorizer import CurrentUser
from portal.auth.dependencies import get_table_client, require_admin
from portal.controllers.user_directory import DirectoryView, UserDetailView, UserDirectoryController
from portal.core.exceptions import BackendError
from portal.rendering.alerts import Alert
from portal.rendering.templates import render_page
from portal.remote.tables import TableClient

router = APIRouter(prefix='/users', tags=['users'])

logger = logging.getLogger(__name__)


def render_users(request: Request, current_user: CurrentUser, view: DirectoryView, detail: UserDetailView | None = None):
    return render_page(
        request,
        'users.html',
        current_user,
        view=view,
        detail=detail,
        active_page='users',
    )


@router.get('')
def list_users(
    request: Request,
    role: str | None = Query(default=None),
    q: str | None = Query(default=None),
    current_user: CurrentUser = Depends(require_admin),
    client: TableClient = Depends(get_table_client),
):
    view = UserDirectoryController(client, current_user).directory(role, q)
    return render_users(request, current_user, view)


@router.post('/admins')
def create_admin(
    request: Request,
    email: str = Form(''),
    password: str = Form(''),
    full_name: str = Form(''),
    department: str = Form(''),
    new_role: str = Form('admin'),
    confirmed: str = Form(''),
    current_user: CurrentUser = Depends(require_admin),
    client: TableClient = Depends(get_table_client),
):
    controller = UserDirectoryController(client, current_user)
    form = {
        'email': email,
        'password': password,
        'full_name': full_name,
        'department': department,
        'role': new_role,
    }
    result = controller.create_admin(form, confirmed=confirmed == 'yes')
    view = controller.directory(alert=result.alert)
    if not result.success and controller.can_manage:
        view.show_create_form = result.alert is not None
        view.create_form = {key: value for key, value in form.items() if key != 'password'}
    return render_users(request, current_user, view)


@router.get('/{user_id}')
def view_user(
    request: Request,
    user_id: str,
    role: str | None = Query(default=None),
    q: str | None = Query(default=None),
    current_user: CurrentUser = Depends(require_admin),
    client: TableClient = Depends(get_table_client),
):
    controller = UserDirectoryController(client, current_user)
    try:
        detail = controller.get_user_detail(user_id)
    except BackendError:
        logger.exception('Error loading user details for %s', user_id)
        return render_users(request, current_user, controller.directory(role, q, Alert.error('Error loading user details')))
    return render_users(request, current_user, controller.directory(role, q), detail)


@router.post('/{user_id}/role')
def change_role(
    request: Request,
    user_id: str,
    new_role: str = Form(''),
    confirmed: str = Form(''),
    current_user: CurrentUser = Depends(require_admin),
    client: TableClient = Depends(get_table_client),
):
    controller = UserDirectoryController(client, current_user)
    result = controller.change_role(user_id, new_role, confirmed=confirmed == 'yes')
    return render_users(request, current_user, controller.directory(alert=result.alert))


@router.post('/{user_id}/delete')
def delete_user(
    request: Request,
    user_id: str,
    confirmed: str = Form(''),
    confirmation: str = Form(''),
    current_user: CurrentUser = Depends(require_admin),
    client: TableClient = Depends(get_table_client),
):
    controller = UserDirectoryController(client, current_user)
    result = controller.delete_user(user_id, confirmed=confirmed == 'yes', confirmation=confirmation)
    return render_users(request, current_user, controller.directory(alert=result.alert))
