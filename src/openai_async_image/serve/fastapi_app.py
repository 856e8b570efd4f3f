"""FastAPI preview service hosting one OpenAIAsyncImage.

Endpoints:
- GET /health
- PUT /prompt     { "prompt": "..." }
- GET /image      ?wait=true blocks until the current fetch settles
- GET /image.png  raw bytes; 202 while loading, 502 on failure

Handlers that touch the component are `async def` so they run on the event
loop that owns the controller.
"""
from __future__ import annotations
import logging
import os
from typing import Any

from fastapi import FastAPI, HTTPException, Response
from pydantic import BaseModel, Field

from openai_async_image.common.config import load_settings
from openai_async_image.common.logging_setup import setup_logging
from openai_async_image.common.schema import PROMPT_MAX_LENGTH
from openai_async_image.common.state import Failed, Loaded
from openai_async_image.common.templates import json_template
from openai_async_image.loader.client import OpenAIDefaultLoader
from openai_async_image.loader.decoders import get_decoder
from openai_async_image.view.async_image import OpenAIAsyncImage

LOGGER = logging.getLogger("openai_async_image.serve.app")
setup_logging()

SETTINGS = load_settings()
INITIAL_PROMPT = os.getenv("OPENAI_IMAGE_PROMPT", "a red cube")

class PromptIn(BaseModel):
    prompt: str = Field(min_length=1, max_length=PROMPT_MAX_LENGTH)

def build_preview() -> OpenAIAsyncImage:
    loader = OpenAIDefaultLoader(SETTINGS.endpoint, decoder=get_decoder(SETTINGS.decoder))
    return OpenAIAsyncImage(
        prompt=INITIAL_PROMPT,
        size=SETTINGS.size,
        model=SETTINGS.model,
        loader=loader,
        tpl=json_template,
    )

preview = build_preview()

app = FastAPI()

@app.on_event("startup")
async def _attach() -> None:
    LOGGER.info("Attaching preview (size=%s model=%s)", preview.size.value, preview.model.value)
    preview.on_attach()

@app.on_event("shutdown")
async def _detach() -> None:
    preview.on_detach()

@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "model": preview.model.value, "size": preview.size.value}

@app.put("/prompt")
async def set_prompt(body: PromptIn) -> dict[str, Any]:
    preview.prompt = body.prompt
    return preview.render()

@app.get("/image")
async def image(wait: bool = False) -> dict[str, Any]:
    if wait:
        await preview.wait()
    return preview.render()

@app.get("/image.png")
async def image_png(wait: bool = False) -> Response:
    state = await preview.wait() if wait else preview.state
    if isinstance(state, Loaded):
        fmt = (state.image.format or "png").lower()
        return Response(content=state.image.data, media_type=f"image/{fmt}")
    if isinstance(state, Failed):
        LOGGER.error("Preview image failed: %s", state.error)
        raise HTTPException(status_code=502, detail=str(state.error))
    return Response(status_code=202)
