from __future__ import annotations

import asyncio
import base64
from io import BytesIO

import pytest
from PIL import Image

from openai_async_image.common.schema import GeneratedImage, ImageModel, ImageSize


def make_png(width: int = 4, height: int = 3, color: tuple[int, int, int] = (255, 0, 0)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


async def drain(rounds: int = 10) -> None:
    """Let pending tasks on the loop run to their next await."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def image_for(prompt: str) -> GeneratedImage:
    return GeneratedImage(data=prompt.encode("utf-8"))


class GatedLoader:
    """Loader whose calls block until the test resolves them by prompt."""

    def __init__(self, *, ignore_cancel: bool = False) -> None:
        self.ignore_cancel = ignore_cancel
        self.calls: list[tuple[str, ImageSize, ImageModel]] = []
        self._gates: dict[str, asyncio.Event] = {}
        self._outcomes: dict[str, GeneratedImage | BaseException] = {}

    def _gate(self, prompt: str) -> asyncio.Event:
        return self._gates.setdefault(prompt, asyncio.Event())

    def resolve(self, prompt: str, outcome: GeneratedImage | BaseException | None = None) -> None:
        self._outcomes[prompt] = image_for(prompt) if outcome is None else outcome
        self._gate(prompt).set()

    async def load(
        self,
        prompt: str,
        size: ImageSize = ImageSize.DPI256,
        model: ImageModel = ImageModel.DALL_E_2,
    ) -> GeneratedImage:
        self.calls.append((prompt, size, model))
        try:
            await self._gate(prompt).wait()
        except asyncio.CancelledError:
            if not self.ignore_cancel:
                raise
            # finish anyway, as a loader past its last await point would
            await self._gate(prompt).wait()
        outcome = self._outcomes[prompt]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class ImmediateLoader:
    """Loader that answers right away with the prompt bytes, or raises `error`."""

    def __init__(self, error: BaseException | None = None) -> None:
        self.error = error
        self.calls: list[str] = []

    async def load(
        self,
        prompt: str,
        size: ImageSize = ImageSize.DPI256,
        model: ImageModel = ImageModel.DALL_E_2,
    ) -> GeneratedImage:
        self.calls.append(prompt)
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return image_for(prompt)


@pytest.fixture()
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture()
def png_b64(png_bytes: bytes) -> str:
    return base64.b64encode(png_bytes).decode("ascii")


SETTINGS_ENV_VARS = (
    "OPENAI_IMAGE_CFG",
    "OPENAI_BASE_URL",
    "OPENAI_API_KEY",
    "OPENAI_IMAGE_PATH",
    "OPENAI_IMAGE_SIZE",
    "OPENAI_IMAGE_MODEL",
    "OPENAI_IMAGE_DECODER",
    "OPENAI_TIMEOUT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep settings from the developer's shell out of every test."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
