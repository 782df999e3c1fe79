from fastapi import FastAPI, Request
from loguru import logger
from starlette import status
from starlette.responses import JSONResponse

from favicon_service.config import AppSettings
from favicon_service.errors import AuthMissingError, AuthInvalidError, BodyTooLargeError, FaviconError
from favicon_service.healthcheck.routes import hc_route
from favicon_service.images.routes import images_router
from favicon_service.models import ErrorResponse


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


async def _auth_missing_handler(_: Request, __: AuthMissingError) -> JSONResponse:
    return _error_response(status.HTTP_401_UNAUTHORIZED, "Unauthorized")


async def _auth_invalid_handler(_: Request, __: AuthInvalidError) -> JSONResponse:
    return _error_response(status.HTTP_403_FORBIDDEN, "Forbidden")


async def _body_too_large_handler(_: Request, e: BodyTooLargeError) -> JSONResponse:
    logger.warning(f"Request body exceeds {e.limit} bytes")
    return _error_response(status.HTTP_413_CONTENT_TOO_LARGE, str(e))


async def _favicon_error_handler(request: Request, e: FaviconError) -> JSONResponse:
    logger.bind(path=request.url.path).error(f"Favicon generation error: {e!r}")
    return _error_response(status.HTTP_400_BAD_REQUEST, str(e))


def create_web_app(app_settings: AppSettings) -> FastAPI:
    """ Builds the web application, ``app_settings`` are shared read-only by all requests """
    assert app_settings is not None, "app_settings is required"

    result = FastAPI()
    result.state.settings = app_settings
    result.include_router(images_router)
    result.include_router(hc_route)

    result.add_exception_handler(AuthMissingError, _auth_missing_handler)
    result.add_exception_handler(AuthInvalidError, _auth_invalid_handler)
    result.add_exception_handler(BodyTooLargeError, _body_too_large_handler)
    result.add_exception_handler(FaviconError, _favicon_error_handler)
    return result
