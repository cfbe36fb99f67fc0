from fastapi import APIRouter

from config_service.schemas.application import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness probe for load balancers. Does not touch the database."""
    return HealthResponse(status="healthy")
