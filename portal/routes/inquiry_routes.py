import logging

from fastapi import APIRouter, Depends, Query, Request

from portal.auth.authorizer import CurrentUser
from portal.auth.dependencies import get_table_client, require_admin
from portal.controllers.inquiry_review import InquiryDetailView, InquiryListView, InquiryReviewController
from portal.core.exceptions import BackendError
from portal.rendering.alerts import Alert
from portal.rendering.templates import render_page
from portal.remote.tables import TableClient

router = APIRouter(prefix='/inquiries', tags=['inquiries'])

logger = logging.getLogger(__name__)


def render_inquiries(request: Request, current_user: CurrentUser, view: InquiryListView, detail: InquiryDetailView | None = None):
    return render_page(
        request,
        'inquiries.html',
        current_user,
        view=view,
        detail=detail,
        active_page='inquiries',
    )


@router.get('')
def list_inquiries(
    request: Request,
    status: str | None = Query(default=None),
    q: str | None = Query(default=None),
    current_user: CurrentUser = Depends(require_admin),
    client: TableClient = Depends(get_table_client),
):
    view = InquiryReviewController(client, current_user).review(status, q)
    return render_inquiries(request, current_user, view)


@router.get('/{inquiry_id}')
def view_inquiry(
    request: Request,
    inquiry_id: int,
    status: str | None = Query(default=None),
    q: str | None = Query(default=None),
    current_user: CurrentUser = Depends(require_admin),
    client: TableClient = Depends(get_table_client),
):
    controller = InquiryReviewController(client, current_user)
    view = controller.review(status, q)
    try:
        detail = controller.get_inquiry_detail(inquiry_id)
    except BackendError:
        logger.exception('Error loading inquiry details for %s', inquiry_id)
        view.alert = Alert.error('Error loading inquiry details')
        return render_inquiries(request, current_user, view)
    if detail is None:
        view.alert = Alert.error('Inquiry not found')
    return render_inquiries(request, current_user, view, detail)
