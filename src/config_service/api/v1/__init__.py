from fastapi import APIRouter

from . import applications

api_router = APIRouter()
api_router.include_router(applications.router)

__all__ = ["api_router"]
