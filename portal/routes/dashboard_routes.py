from fastapi import APIRouter, Depends, Request

from portal.auth.authorizer import CurrentUser
from portal.auth.dependencies import get_table_client, require_admin
from portal.controllers.dashboard import DashboardController
from portal.rendering.templates import render_page
from portal.remote.tables import TableClient

router = APIRouter(tags=['dashboard'])


@router.get('/dashboard')
def dashboard(
    request: Request,
    current_user: CurrentUser = Depends(require_admin),
    client: TableClient = Depends(get_table_client),
):
    view = DashboardController(client, current_user).overview()
    return render_page(request, 'dashboard.html', current_user, view=view, active_page='dashboard')
