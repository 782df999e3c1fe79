import base64
import binascii
import re
from logging import Logger

import anyio
import httpx

from favicon_service.errors import DecodeError, FetchError, InputMissingError
from favicon_service.models import EncodedImage, ImageSource, RemoteImage, UploadedImage

_DATA_URI_RE = re.compile(r"^data:(?P<mime>.*?);base64,(?P<payload>.*)$", re.DOTALL)


def select_image_source(uploaded: bytes | None = None,
                        url: str | None = None,
                        encoded: str | None = None) -> ImageSource:
    """
    Picks exactly one image source, precedence is upload, url, encoded payload.
    Empty uploads are kept as is, they never fall through to the other inputs.
    :raises InputMissingError: if none of the inputs is set
    """
    if uploaded is not None:
        return UploadedImage(uploaded)

    if url:
        return RemoteImage(url)

    if encoded:
        return EncodedImage(encoded)

    raise InputMissingError()


def decode_payload(payload: str) -> bytes:
    """ Decodes raw base64 or a ``data:<mime>;base64,<payload>`` string """
    match = _DATA_URI_RE.match(payload)
    data = match.group('payload') if match else payload
    data = "".join(data.split())

    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 image payload: {e}") from e


class ImageResolver:
    _logger: Logger
    _fetch_timeout: float
    _transport: httpx.AsyncBaseTransport | None

    def __init__(self, logger: Logger, fetch_timeout: float,
                 transport: httpx.AsyncBaseTransport | None = None):
        assert logger is not None, "logger is required"
        assert fetch_timeout > 0, "fetch_timeout must be greater than 0"

        self._logger = logger
        self._fetch_timeout = fetch_timeout
        self._transport = transport

    async def resolve(self, source: ImageSource) -> bytes:
        match source:
            case UploadedImage(data=data):
                self._logger.debug(f"Using uploaded image, {len(data)} bytes")
                return data
            case RemoteImage(url=url):
                return await self._fetch(url)
            case EncodedImage(payload=payload):
                data = decode_payload(payload)
                self._logger.debug(f"Decoded base64 image, {len(data)} bytes")
                return data

        raise TypeError(f"Unsupported image source: {source!r}")

    async def _fetch(self, url: str) -> bytes:
        self._logger.debug(f"Downloading image from {url}")
        try:
            # httpx timeout bounds each network operation, fail_after bounds the whole download
            with anyio.fail_after(self._fetch_timeout):
                async with httpx.AsyncClient(timeout=self._fetch_timeout, follow_redirects=True,
                                             transport=self._transport) as client:
                    response = await client.get(url)
                    response.raise_for_status()
        except (TimeoutError, httpx.TimeoutException) as e:
            raise FetchError(url, f"timed out after {self._fetch_timeout} seconds") from e
        except httpx.HTTPStatusError as e:
            raise FetchError(url, f"server responded with {e.response.status_code}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(url, str(e) or type(e).__name__) from e

        self._logger.debug(f"Downloaded {len(response.content)} bytes")
        return response.content
