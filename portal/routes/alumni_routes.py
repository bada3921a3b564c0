import logging

from fastapi import APIRouter, Depends, Form, Query, Request

from portal.auth.authorizer import CurrentUser
from portal.auth.dependencies import get_table_client, require_admin
from portal.controllers.alumni_review import AlumniListView, AlumniReviewController, AlumniRow
from portal.core.exceptions import BackendError
from portal.rendering.alerts import Alert
from portal.rendering.templates import render_page
from portal.remote.tables import TableClient

router = APIRouter(prefix='/alumni', tags=['alumni'])

logger = logging.getLogger(__name__)


def render_alumni(request: Request, current_user: CurrentUser, view: AlumniListView, detail: AlumniRow | None = None):
    return render_page(
        request,
        'alumni.html',
        current_user,
        view=view,
        detail=detail,
        active_page='alumni',
    )


@router.get('')
def list_alumni(
    request: Request,
    filter: str | None = Query(default=None),
    current_user: CurrentUser = Depends(require_admin),
    client: TableClient = Depends(get_table_client),
):
    view = AlumniReviewController(client, current_user).list_alumni(filter)
    return render_alumni(request, current_user, view)


@router.get('/{alumni_id}')
def view_alumni(
    request: Request,
    alumni_id: int,
    filter: str | None = Query(default=None),
    current_user: CurrentUser = Depends(require_admin),
    client: TableClient = Depends(get_table_client),
):
    controller = AlumniReviewController(client, current_user)
    try:
        detail = controller.get_alumni(alumni_id)
    except BackendError:
        logger.exception('Error loading alumni details for %s', alumni_id)
        return render_alumni(request, current_user, controller.list_alumni(filter, Alert.error('Error loading alumni details')))
    return render_alumni(request, current_user, controller.list_alumni(filter), detail)


@router.post('/{alumni_id}/verification')
def set_verification(
    request: Request,
    alumni_id: int,
    value: bool = Form(...),
    confirmed: str = Form(''),
    filter: str | None = Form(None),
    current_user: CurrentUser = Depends(require_admin),
    client: TableClient = Depends(get_table_client),
):
    view = AlumniReviewController(client, current_user).set_verification(
        alumni_id,
        value,
        confirmed=confirmed == 'yes',
        verification_filter=filter,
    )
    return render_alumni(request, current_user, view)
