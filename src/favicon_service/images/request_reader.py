from logging import Logger
from urllib import parse

from pydantic import ValidationError
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.requests import Request

from favicon_service.errors import BodyTooLargeError, InvalidRequestError
from favicon_service.images.input_resolver import select_image_source
from favicon_service.models import FaviconRequest, ImageSource

FIELD_IMAGE = "image"

_multipart = "multipart/form-data"
_json = "application/json"
_url_encoded = "application/x-www-form-urlencoded"


async def _read_body(request: Request, max_body_size: int) -> bytes:
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > max_body_size:
        raise BodyTooLargeError(max_body_size)

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_body_size:
            raise BodyTooLargeError(max_body_size)

    return bytes(body)


def _parse_json(body: bytes) -> FaviconRequest:
    if not body.strip():
        return FaviconRequest()

    try:
        return FaviconRequest.model_validate_json(body)
    except ValidationError as e:
        raise InvalidRequestError(f"Invalid JSON body: {e.errors()[0]['msg']}") from e


def _parse_url_encoded(body: bytes) -> FaviconRequest:
    try:
        text = body.decode('utf-8')
    except UnicodeDecodeError as e:
        raise InvalidRequestError("Url-encoded body is not valid UTF-8") from e

    raw_values = parse.parse_qs(text)
    raw_dict = {k: v[0] for k, v in raw_values.items()}
    return FaviconRequest.model_validate(raw_dict)


async def _read_multipart(request: Request) -> tuple[bytes | None, FaviconRequest]:
    try:
        form = await request.form()
    except HTTPException as e:
        raise InvalidRequestError(f"Invalid multipart body: {e.detail}") from e

    uploaded: bytes | None = None

    image = form.get(FIELD_IMAGE)
    if isinstance(image, UploadFile):
        uploaded = await image.read()

    text_fields = {k: v for k, v in form.items() if isinstance(v, str)}
    return uploaded, FaviconRequest.model_validate(text_fields)


async def read_image_source(request: Request, max_body_size: int, logger: Logger) -> ImageSource:
    """
    Reads the body of ``POST /favicon`` and picks the image source out of it.
    Accepts a multipart upload (field "image"), JSON or url-encoded ``imageUrl`` / ``imageBase64``.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    uploaded: bytes | None = None

    if content_type == _multipart:
        uploaded, favicon_request = await _read_multipart(request)
    elif content_type == _url_encoded:
        favicon_request = _parse_url_encoded(await _read_body(request, max_body_size))
    elif content_type == _json or content_type.endswith("+json"):
        favicon_request = _parse_json(await _read_body(request, max_body_size))
    else:
        favicon_request = FaviconRequest()

    inputs = [uploaded is not None, bool(favicon_request.image_url), bool(favicon_request.image_base64)]
    if sum(inputs) > 1:
        logger.warning("Request carries more than one image source, using the first of: image, imageUrl, imageBase64")

    return select_image_source(uploaded, favicon_request.image_url, favicon_request.image_base64)
