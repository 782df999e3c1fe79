from logging import Logger

from favicon_service.images.favicon_renderer import render_favicon_async, to_data_uri, FAVICON_SIZE
from favicon_service.images.input_resolver import ImageResolver
from favicon_service.models import ImageSource


class FaviconService:
    _image_resolver: ImageResolver
    _logger: Logger
    _size: int

    def __init__(self, image_resolver: ImageResolver, logger: Logger, size: int = FAVICON_SIZE):
        assert image_resolver is not None, "image_resolver is required"
        assert logger is not None, "logger is required"

        self._image_resolver = image_resolver
        self._logger = logger
        self._size = size

    async def create_favicon(self, source: ImageSource) -> str:
        """
        Resolves the image source and renders it into a circular PNG favicon
        :return: ``data:image/png;base64,...`` string
        """
        image_data = await self._image_resolver.resolve(source)
        self._logger.debug("Source image was loaded into memory")

        favicon = await render_favicon_async(image_data, self._size)
        self._logger.debug(f"Favicon was rendered, {len(favicon)} bytes")
        return to_data_uri(favicon)
