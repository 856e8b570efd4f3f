"""Render templates for the load state."""
from __future__ import annotations
import base64
from typing import Any

from openai_async_image.common.state import Failed, Loaded, LoadState

LOADING_TEXT = "Loading..."

def text_template(state: LoadState) -> str:
    """
    Render a state as one line of text.

    Args:
        state: Current load state.

    Returns:
        A progress line, an image summary, or the error message.
    """
    if isinstance(state, Loaded):
        img = state.image
        dims = f"{img.width}x{img.height}" if img.width and img.height else "?x?"
        fmt = img.format or "raw"
        return f"<image {dims} {fmt}, {len(img.data)} bytes>"
    if isinstance(state, Failed):
        return str(state.error)
    return LOADING_TEXT

def json_template(state: LoadState) -> dict[str, Any]:
    """Render a state as a JSON-serialisable dict."""
    if isinstance(state, Loaded):
        img = state.image
        return {
            "state": "loaded",
            "image_b64": base64.b64encode(img.data).decode("ascii"),
            "width": img.width,
            "height": img.height,
            "format": img.format,
        }
    if isinstance(state, Failed):
        return {
            "state": "failed",
            "error": str(state.error),
            "error_type": type(state.error).__name__,
        }
    return {"state": "loading"}
