import secrets
from typing import Annotated

from fastapi import Header, Request
from loguru import logger

from favicon_service.errors import AuthInvalidError, AuthMissingError

_BEARER_PREFIX = "Bearer "


def verify_bearer_token(request: Request,
                        authorization: Annotated[str | None, Header()] = None) -> None:
    """ Checks ``Authorization: Bearer <token>`` against the configured token """
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        logger.debug("Request without bearer token")
        raise AuthMissingError()

    token = authorization[len(_BEARER_PREFIX):]
    expected = request.app.state.settings.auth_token
    if not secrets.compare_digest(token.encode(), expected.encode()):
        logger.debug("Request with invalid bearer token")
        raise AuthInvalidError()
