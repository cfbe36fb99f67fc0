"""
/api/v1/applications

Handlers stay thin: validation, persistence and error classification happen in
ApplicationService; failures surface as ServiceError subclasses and are turned
into `{message, details}` bodies by the registered exception handlers.
"""
import logging

from fastapi import APIRouter, Depends, Request, Response, status

from config_service.core.dependencies import get_application_service
from config_service.schemas.application import ApplicationResponse, CreateApplicationRequest, ErrorResponse
from config_service.services.application_service import ApplicationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])


@router.get(
    "",
    name="list_applications",
    response_model=list[ApplicationResponse],
    responses={500: {"model": ErrorResponse}},
)
async def list_applications(service: ApplicationService = Depends(get_application_service)):
    applications = await service.list_applications()
    return [ApplicationResponse.model_validate(app) for app in applications]


@router.post(
    "",
    name="create_application",
    status_code=status.HTTP_201_CREATED,
    response_model=ApplicationResponse,
    responses={
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def create_application(
    payload: CreateApplicationRequest,
    request: Request,
    response: Response,
    service: ApplicationService = Depends(get_application_service),
):
    application = await service.create_application(payload.name, payload.description)

    # No single-resource route exists; point at the collection filtered by id.
    response.headers["Location"] = str(
        request.url_for("list_applications").include_query_params(id=application.id)
    )
    return ApplicationResponse.model_validate(application)
