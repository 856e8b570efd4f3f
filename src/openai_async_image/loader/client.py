"""Loaders: one request/response cycle against the OpenAI Images API.

`OpenAIDefaultLoader.load` posts the prompt, decodes the base64 payload and
materialises it with the configured decoder. It keeps no state between calls
and never retries. `asyncio.CancelledError` is left to propagate so the
controller can tell a superseded fetch from a failed one.
"""
from __future__ import annotations
import asyncio
import base64
import binascii
import logging
from typing import Protocol, runtime_checkable

import httpx
from pydantic import ValidationError

from openai_async_image.common.config import ImageEndpoint
from openai_async_image.common.errors import (
    ClientNotConfigured,
    ImageConstructionFailed,
    InvalidPrompt,
    NoImagesReturned,
    ResponseDecodeError,
    map_request_error,
)
from openai_async_image.common.schema import (
    PROMPT_MAX_LENGTH,
    GeneratedImage,
    ImageModel,
    ImageRequest,
    ImageResponse,
    ImageSize,
    ResponseFormat,
)
from openai_async_image.loader.decoders import ImageDecoder, PillowImageDecoder

LOGGER = logging.getLogger("openai_async_image.loader")

@runtime_checkable
class ImageLoader(Protocol):
    async def load(
        self,
        prompt: str,
        size: ImageSize = ImageSize.DPI256,
        model: ImageModel = ImageModel.DALL_E_2,
    ) -> GeneratedImage:
        """Load one image for `prompt`. Raises AsyncImageError on failure."""
        ...

def _parse_base_url(url_string: str) -> httpx.URL | None:
    """Return the base URL, or None when it cannot address a server."""
    try:
        url = httpx.URL(url_string)
    except (httpx.InvalidURL, TypeError):
        return None
    if url.scheme not in ("http", "https") or not url.host:
        return None
    return url

class OpenAIDefaultLoader:
    """
    Default loader backed by httpx.

    Args:
        endpoint: Base URL, path, API key and timeout.
        decoder: Bytes-to-image decoder. Defaults to Pillow.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        endpoint: ImageEndpoint,
        *,
        decoder: ImageDecoder | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.decoder = decoder or PillowImageDecoder()
        self._transport = transport
        self._base_url = _parse_base_url(endpoint.url_string)
        if self._base_url is None:
            LOGGER.warning("Invalid image API base URL %r; every load will fail", endpoint.url_string)

    @property
    def configured(self) -> bool:
        return self._base_url is not None

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.endpoint.api_key}",
        }

    async def load(
        self,
        prompt: str,
        size: ImageSize = ImageSize.DPI256,
        model: ImageModel = ImageModel.DALL_E_2,
    ) -> GeneratedImage:
        """
        Generate an image for a text prompt.

        Args:
            prompt: Text description of the desired image, 1-1000 characters.
            size: Size of the generated image.
            model: Generation model.

        Raises:
            ClientNotConfigured: The base URL was invalid at construction.
            InvalidPrompt: The prompt is empty or too long.
            HttpStatusError: Non-2xx response.
            TransportError: Connection-level failure or malformed body.
            NoImagesReturned: The response held an empty image list.
            ImageConstructionFailed: The payload is not a decodable image.
        """
        if self._base_url is None:
            raise ClientNotConfigured()
        if not 1 <= len(prompt) <= PROMPT_MAX_LENGTH:
            raise InvalidPrompt(len(prompt))

        body = ImageRequest(
            model=model,
            prompt=prompt,
            size=size,
            response_format=ResponseFormat.B64,
            n=1,
        )

        LOGGER.debug("POST %s%s model=%s size=%s", self._base_url, self.endpoint.path, model.value, size.value)
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self.endpoint.timeout_s,
                transport=self._transport,
            ) as client:
                r = await client.post(
                    self.endpoint.path,
                    headers=self._headers(),
                    json=body.model_dump(mode="json"),
                )
                r.raise_for_status()
        except httpx.HTTPError as e:
            raise map_request_error(e) from e

        try:
            output = ImageResponse.model_validate_json(r.content)
        except ValidationError as e:
            raise ResponseDecodeError(e) from e

        b64_data = output.first_image
        if b64_data is None:
            raise NoImagesReturned()

        return await asyncio.to_thread(self._materialise, b64_data)

    def _materialise(self, b64_data: str) -> GeneratedImage:
        try:
            raw_bytes = base64.b64decode(b64_data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageConstructionFailed(e) from e
        try:
            return self.decoder.decode(raw_bytes)
        except Exception as e:
            raise ImageConstructionFailed(e) from e
