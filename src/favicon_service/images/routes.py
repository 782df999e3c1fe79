from fastapi import APIRouter, Depends

from favicon_service.auth import verify_bearer_token
from favicon_service.images.dependencies import FaviconServiceDep, ImageSourceDep
from favicon_service.models import FaviconResponse

images_router = APIRouter(dependencies=[Depends(verify_bearer_token)])


@images_router.post("/favicon")
async def create_favicon(source: ImageSourceDep, favicon_service: FaviconServiceDep) -> FaviconResponse:
    favicon = await favicon_service.create_favicon(source)
    return FaviconResponse(favicon=favicon)
