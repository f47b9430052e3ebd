"""Visit ingestion API endpoint.

POST /visits — record a canvassing visit
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from canvass_api.core.background import TaskQueue
from canvass_api.core.config import Settings, get_settings
from canvass_api.core.dependencies import get_async_session, get_current_user, get_geocoder, get_task_queue
from canvass_api.lib.geocoder import CanvassGeocoder
from canvass_api.models.user import User
from canvass_api.schemas.common import ErrorResponse
from canvass_api.schemas.visit import VisitCreateRequest, VisitResponse
from canvass_api.services import visit_service

visits_router = APIRouter(prefix="/visits", tags=["visits"])


@visits_router.post(
    "",
    response_model=VisitResponse,
    status_code=201,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def create_visit(
    request: VisitCreateRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    geocoder: Annotated[CanvassGeocoder, Depends(get_geocoder)],
    task_queue: Annotated[TaskQueue, Depends(get_task_queue)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VisitResponse:
    """Record a visit for the authenticated volunteer.

    Leaderboards are updated asynchronously after the response is sent.
    """
    ingested = await visit_service.ingest(
        session,
        request,
        current_user,
        geocoder=geocoder,
        task_queue=task_queue,
        settings=settings,
    )
    return VisitResponse.from_ingested(ingested)
