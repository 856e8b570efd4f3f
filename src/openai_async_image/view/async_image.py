"""Consumer-facing async image component.

Holds the mutable prompt and the fixed size/model/loader/template, and maps
host lifecycle hooks onto the `LoadController`:

    on_attach          -> start
    on_input_change(p) -> start (when attached)
    on_detach          -> cancel
"""
from __future__ import annotations
import logging
from typing import Any, Callable

from openai_async_image.common.config import load_settings
from openai_async_image.common.schema import ImageModel, ImageSize
from openai_async_image.common.state import LoadState
from openai_async_image.common.templates import text_template
from openai_async_image.loader.client import ImageLoader, OpenAIDefaultLoader
from openai_async_image.loader.decoders import get_decoder
from openai_async_image.view.controller import LoadController

LOGGER = logging.getLogger("openai_async_image.view")

RenderTemplate = Callable[[LoadState], Any]

def default_loader() -> OpenAIDefaultLoader:
    """Loader built from `load_settings()` (YAML + environment)."""
    settings = load_settings()
    return OpenAIDefaultLoader(settings.endpoint, decoder=get_decoder(settings.decoder))

class OpenAIAsyncImage:
    """
    Load and render an image generated from `prompt`.

    Args:
        prompt: Text description of the desired image. Max 1000 characters.
        size: Size of the generated image.
        model: Generation model.
        loader: Custom loader. Defaults to `default_loader()`.
        tpl: Custom render template called with the current state.
        clear_on_restart: Show Loading immediately on a prompt change.
    """

    def __init__(
        self,
        prompt: str,
        size: ImageSize = ImageSize.DPI256,
        model: ImageModel = ImageModel.DALL_E_2,
        loader: ImageLoader | None = None,
        tpl: RenderTemplate | None = None,
        *,
        clear_on_restart: bool = True,
    ) -> None:
        self._prompt = prompt
        self.size = size
        self.model = model
        self.loader = loader if loader is not None else default_loader()
        self.tpl = tpl or text_template
        self.controller = LoadController(self.loader, clear_on_restart=clear_on_restart)
        self._attached = False

    @property
    def prompt(self) -> str:
        return self._prompt

    @prompt.setter
    def prompt(self, value: str) -> None:
        if value != self._prompt:
            self.on_input_change(value)

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def state(self) -> LoadState:
        return self.controller.state

    def on_attach(self) -> None:
        if self._attached:
            return
        self._attached = True
        self.controller.start(self._prompt, self.size, self.model)

    def on_input_change(self, prompt: str) -> None:
        self._prompt = prompt
        if self._attached:
            self.controller.start(prompt, self.size, self.model)

    def on_detach(self) -> None:
        self._attached = False
        self.controller.cancel()

    def render(self) -> Any:
        return self.tpl(self.controller.state)

    async def wait(self) -> LoadState:
        return await self.controller.wait()
