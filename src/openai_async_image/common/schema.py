"""Pydantic models and dataclasses for the OpenAI Images wire format.

See https://platform.openai.com/docs/api-reference/images
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

PROMPT_MAX_LENGTH = 1000

class ImageSize(str, Enum):
    """The size of the generated images."""
    DPI256 = "256x256"
    DPI512 = "512x512"
    DPI1024 = "1024x1024"

class ImageModel(str, Enum):
    """Backend generation model. The first member is the default."""
    DALL_E_2 = "dall-e-2"
    DALL_E_3 = "dall-e-3"

class ResponseFormat(str, Enum):
    URL = "url"
    B64 = "b64_json"

class ImageRequest(BaseModel):
    """Request body for POST /v1/images/generations."""
    model: ImageModel = ImageModel.DALL_E_2
    prompt: str = Field(min_length=1, max_length=PROMPT_MAX_LENGTH)
    size: ImageSize = ImageSize.DPI256
    response_format: ResponseFormat = ResponseFormat.B64
    n: int = 1

class Base64Image(BaseModel):
    b64_json: str

class ImageResponse(BaseModel):
    """Successful response body."""
    created: int
    data: list[Base64Image]

    @property
    def first_image(self) -> str | None:
        """First image from the received data set."""
        return self.data[0].b64_json if self.data else None

class ErrorDetail(BaseModel):
    code: str | None = None
    message: str
    param: str | None = None
    type: str | None = None

class ErrorEnvelope(BaseModel):
    """Vendor error body: {"error": {"message": ..., ...}}."""
    error: ErrorDetail

@dataclass(frozen=True)
class GeneratedImage:
    """Decoded image returned by a loader.

    `data` holds the exact bytes decoded from the base64 payload; `image` is
    the platform object produced by the configured decoder (None for raw).
    """
    data: bytes
    image: Any = field(default=None, compare=False, repr=False)
    width: int | None = None
    height: int | None = None
    format: str | None = None
