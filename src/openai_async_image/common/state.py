"""Tri-state view model observed by consumers."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Union

from openai_async_image.common.errors import AsyncImageError
from openai_async_image.common.schema import GeneratedImage

@dataclass(frozen=True)
class Loading:
    """The image is being fetched, or no fetch has finished yet."""

@dataclass(frozen=True)
class Loaded:
    image: GeneratedImage

@dataclass(frozen=True)
class Failed:
    error: AsyncImageError

LoadState = Union[Loading, Loaded, Failed]
