class AuthMissingError(Exception):
    """ Request doesn't carry a bearer token """

    def __init__(self):
        super().__init__("Unauthorized")


class AuthInvalidError(Exception):
    """ Request carries a bearer token which doesn't match the configured one """

    def __init__(self):
        super().__init__("Forbidden")


class BodyTooLargeError(Exception):
    def __init__(self, limit: int):
        super().__init__("Request body is too large")
        self.limit = limit


class FaviconError(Exception):
    """ Base class for failures while turning a request into a favicon """


class InputMissingError(FaviconError):
    def __init__(self):
        super().__init__('No image provided. Send as multipart file (field "image"), '
                         'JSON url (imageUrl), or JSON base64 (imageBase64).')


class InvalidRequestError(FaviconError):
    pass


class FetchError(FaviconError):
    """ Remote image couldn't be downloaded, the underlying error is kept in ``__cause__`` """

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch image from '{url}': {reason}")
        self.url = url


class DecodeError(FaviconError):
    pass


class RenderError(FaviconError):
    pass
