"""Endpoint and loader configuration.

Values come from an optional YAML file, then environment variables override
them. Nothing here is looked up implicitly by the loader or the controller:
callers build settings and pass them in.
"""
from __future__ import annotations
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from openai_async_image.common.schema import ImageModel, ImageSize

DEFAULT_CFG_PATH = "configs/openai_image.yaml"
DEFAULT_BASE_URL = "https://api.openai.com"
DEFAULT_PATH = "/v1/images/generations"

@dataclass(frozen=True)
class ImageEndpoint:
    """Access parameters for the OpenAI image resource."""
    url_string: str = DEFAULT_BASE_URL
    api_key: str = field(default="", repr=False)
    path: str = DEFAULT_PATH
    timeout_s: float = 120.0

    @classmethod
    def get(cls, api_key: str) -> "ImageEndpoint":
        """Endpoint for the public API with the given key."""
        return cls(api_key=api_key)

@dataclass(frozen=True)
class Settings:
    endpoint: ImageEndpoint
    size: ImageSize = ImageSize.DPI256
    model: ImageModel = ImageModel.DALL_E_2
    decoder: str = "pillow"

def load_cfg(path: str | Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}

def load_settings(cfg_path: str | Path | None = None) -> Settings:
    """
    Build settings from YAML (if present) and the environment.

    Args:
        cfg_path: YAML path. Defaults to $OPENAI_IMAGE_CFG or configs/openai_image.yaml.

    Raises:
        ValueError: On an unsupported size or model.
    """
    path = Path(cfg_path or os.getenv("OPENAI_IMAGE_CFG", DEFAULT_CFG_PATH))
    cfg = load_cfg(path) if path.exists() else {}

    endpoint = ImageEndpoint(
        url_string=str(cfg.get("base_url", DEFAULT_BASE_URL)),
        api_key=str(cfg.get("api_key", "") or ""),
        path=str(cfg.get("path", DEFAULT_PATH)),
        timeout_s=float(cfg.get("timeout_s", 120.0)),
    )
    env_overrides = {
        "url_string": os.getenv("OPENAI_BASE_URL"),
        "api_key": os.getenv("OPENAI_API_KEY"),
        "path": os.getenv("OPENAI_IMAGE_PATH"),
    }
    endpoint = replace(endpoint, **{k: v for k, v in env_overrides.items() if v is not None})
    timeout = os.getenv("OPENAI_TIMEOUT")
    if timeout is not None:
        endpoint = replace(endpoint, timeout_s=float(timeout))

    size = os.getenv("OPENAI_IMAGE_SIZE", cfg.get("size", ImageSize.DPI256.value))
    model = os.getenv("OPENAI_IMAGE_MODEL", cfg.get("model", ImageModel.DALL_E_2.value))
    decoder = os.getenv("OPENAI_IMAGE_DECODER", cfg.get("decoder", "pillow"))

    return Settings(
        endpoint=endpoint,
        size=ImageSize(size),
        model=ImageModel(model),
        decoder=str(decoder),
    )
