"""Generate one image from the command line.

Attaches an OpenAIAsyncImage, waits for the fetch to settle, prints the
rendered state and optionally writes the image bytes to disk.
"""
from __future__ import annotations
import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path

from openai_async_image.common.config import load_settings
from openai_async_image.common.logging_setup import setup_logging
from openai_async_image.common.schema import ImageModel, ImageSize
from openai_async_image.common.state import Loaded, LoadState
from openai_async_image.common.templates import text_template
from openai_async_image.loader.client import OpenAIDefaultLoader
from openai_async_image.loader.decoders import get_decoder
from openai_async_image.view.async_image import OpenAIAsyncImage

LOGGER = logging.getLogger("openai_async_image.cli")

async def generate(
    prompt: str,
    cfg_path: str | None = None,
    size: str | None = None,
    model: str | None = None,
) -> LoadState:
    """
    Run one fetch cycle and return the settled state.

    Args:
        prompt: Text description of the desired image.
        cfg_path: YAML config path.
        size: Size override, e.g. "512x512".
        model: Model override, e.g. "dall-e-3".
    """
    settings = load_settings(cfg_path)
    loader = OpenAIDefaultLoader(settings.endpoint, decoder=get_decoder(settings.decoder))
    view = OpenAIAsyncImage(
        prompt=prompt,
        size=ImageSize(size) if size else settings.size,
        model=ImageModel(model) if model else settings.model,
        loader=loader,
    )
    view.on_attach()
    try:
        return await view.wait()
    finally:
        view.on_detach()

def main() -> None:
    setup_logging()
    ap = argparse.ArgumentParser(description="Generate an image with the OpenAI Images API")
    ap.add_argument("--prompt", required=True, help="Text description of the image")
    ap.add_argument("--size", choices=[s.value for s in ImageSize], default=None)
    ap.add_argument("--model", choices=[m.value for m in ImageModel], default=None)
    ap.add_argument("--cfg", default=None, help="Config path")
    ap.add_argument("--out", default=None, help="Write the image bytes here")
    args = ap.parse_args()

    start = time.time()
    state = asyncio.run(generate(args.prompt, args.cfg, args.size, args.model))
    latency_ms = int((time.time() - start) * 1000)

    print(text_template(state))
    if not isinstance(state, Loaded):
        LOGGER.error("Generation failed after %sms", latency_ms)
        sys.exit(1)

    LOGGER.info("Latency: %sms | %s bytes", latency_ms, len(state.image.data))
    if args.out:
        Path(args.out).write_bytes(state.image.data)
        LOGGER.info("Wrote %s", args.out)

if __name__ == "__main__":
    main()
