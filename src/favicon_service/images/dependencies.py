from typing import Annotated

from logging import Logger
from fastapi import Depends, Request
from loguru import logger

from favicon_service.config import AppSettings
from favicon_service.images.favicon_service import FaviconService
from favicon_service.images.input_resolver import ImageResolver
from favicon_service.images.request_reader import read_image_source
from favicon_service.models import ImageSource, UploadedImage, RemoteImage


def get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


SettingsDep = Annotated[AppSettings, Depends(get_settings)]


def _get_base_logger() -> Logger:
    return logger.bind(source="favicon")  # type: ignore


BaseLoggerDep = Annotated[Logger, Depends(_get_base_logger)]


async def _get_image_source(request: Request, settings: SettingsDep, base_logger: BaseLoggerDep) -> ImageSource:
    return await read_image_source(request, settings.max_body_size, base_logger)


ImageSourceDep = Annotated[ImageSource, Depends(_get_image_source)]


def _source_kind(source: ImageSource) -> str:
    if isinstance(source, UploadedImage):
        return "upload"
    if isinstance(source, RemoteImage):
        return "url"
    return "base64"


def _get_request_logger(source: ImageSourceDep, base_logger: BaseLoggerDep) -> Logger:
    return base_logger.bind(source_kind=_source_kind(source))  # type: ignore


RequestLoggerDep = Annotated[Logger, Depends(_get_request_logger)]


def get_image_resolver(settings: SettingsDep, request_logger: RequestLoggerDep) -> ImageResolver:
    return ImageResolver(request_logger, settings.fetch_timeout)


ImageResolverDep = Annotated[ImageResolver, Depends(get_image_resolver)]


def _get_favicon_service(image_resolver: ImageResolverDep, request_logger: RequestLoggerDep) -> FaviconService:
    return FaviconService(image_resolver, request_logger)


FaviconServiceDep = Annotated[FaviconService, Depends(_get_favicon_service)]
