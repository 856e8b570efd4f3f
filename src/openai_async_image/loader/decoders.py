"""Turn raw image bytes into a platform image.

Hosts pick a decoder by name in configuration; the loader only sees the
`ImageDecoder` protocol.
"""
from __future__ import annotations
from io import BytesIO
from typing import Callable, Protocol

from PIL import Image

from openai_async_image.common.schema import GeneratedImage

class ImageDecoder(Protocol):
    def decode(self, data: bytes) -> GeneratedImage:
        """Materialise `data`. Raises on bytes that are not an image."""
        ...

class PillowImageDecoder:
    """Decode into a fully loaded `PIL.Image.Image`."""

    def decode(self, data: bytes) -> GeneratedImage:
        img = Image.open(BytesIO(data))
        # Image.open is lazy; force the pixel data so truncated files fail here
        img.load()
        return GeneratedImage(
            data=data,
            image=img,
            width=img.width,
            height=img.height,
            format=img.format,
        )

class RawImageDecoder:
    """Keep the bytes as-is, for hosts that hand them straight to a browser."""

    def decode(self, data: bytes) -> GeneratedImage:
        if not data:
            raise ValueError("empty image payload")
        return GeneratedImage(data=data)

DECODERS: dict[str, Callable[[], ImageDecoder]] = {
    "pillow": PillowImageDecoder,
    "raw": RawImageDecoder,
}

def get_decoder(name: str) -> ImageDecoder:
    try:
        factory = DECODERS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown image decoder: {name!r} (expected one of {sorted(DECODERS)})") from None
    return factory()
