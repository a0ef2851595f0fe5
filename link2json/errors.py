"""Domain errors. Each carries the HTTP status and the message shown to callers."""

from fastapi import status


class Link2JSONError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal error"

    def __init__(self, detail: str | None = None) -> None:
        # detail is for logs only; callers always get `message`
        super().__init__(detail or self.message)
        self.detail = detail or self.message


class URLRequiredError(Link2JSONError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "URL parameter is required"


class InvalidURLError(Link2JSONError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid URL"


class RateLimitError(Link2JSONError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    message = "Too many requests"


class FetchError(Link2JSONError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Failed to fetch metadata"
