"""Errors raised while loading a generated image.

Every loader failure is an `AsyncImageError`. `Cancelled` is an internal
signal only: the controller never turns it into a failed state.
"""
from __future__ import annotations
import asyncio

import httpx
from pydantic import ValidationError

from openai_async_image.common.schema import ErrorEnvelope

UNDECODABLE_BODY = "Unable to decode data"

class AsyncImageError(Exception):
    """Base class for image loading failures."""

class ClientNotConfigured(AsyncImageError):
    def __init__(self) -> None:
        super().__init__("Client not found. The URL might be invalid.")

class InvalidPrompt(AsyncImageError):
    def __init__(self, length: int) -> None:
        super().__init__(f"Prompt must be 1-1000 characters, got {length}.")
        self.length = length

class NoImagesReturned(AsyncImageError):
    def __init__(self) -> None:
        super().__init__("The response did not contain any images.")

class ImageConstructionFailed(AsyncImageError):
    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__("Unable to create image from the provided data.")
        self.cause = cause

class HttpStatusError(AsyncImageError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(f"HTTP status error: {message}.")
        self.message = message
        self.status_code = status_code

class TransportError(AsyncImageError):
    def __init__(self, cause: BaseException) -> None:
        super().__init__(str(cause) or type(cause).__name__)
        self.cause = cause

class ResponseDecodeError(TransportError):
    """The server answered 2xx but the body is not an image response."""

class Cancelled(AsyncImageError):
    def __init__(self) -> None:
        super().__init__("The image request was cancelled.")


def decode_error_response(content: bytes, status_code: int | None = None) -> HttpStatusError:
    """Build an HttpStatusError from a non-2xx body.

    Uses the vendor envelope message when the body decodes, else the raw text.
    """
    try:
        envelope = ErrorEnvelope.model_validate_json(content)
    except ValidationError:
        pass
    else:
        return HttpStatusError(envelope.error.message, status_code)
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        text = UNDECODABLE_BODY
    return HttpStatusError(text, status_code)


def map_request_error(exc: httpx.HTTPError) -> AsyncImageError:
    """Classify an httpx failure."""
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        content = response.content
        if content:
            return decode_error_response(content, response.status_code)
        return HttpStatusError(
            f"{response.status_code} {response.reason_phrase}".strip(),
            response.status_code,
        )
    return TransportError(exc)


def map_load_error(exc: BaseException) -> AsyncImageError:
    """Classify any exception raised by a loader, including custom ones."""
    if isinstance(exc, AsyncImageError):
        return exc
    if isinstance(exc, asyncio.CancelledError):
        return Cancelled()
    if isinstance(exc, httpx.HTTPError):
        return map_request_error(exc)
    return TransportError(exc)
