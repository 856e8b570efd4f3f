"""Load lifecycle controller.

Owns the current `LoadState` and at most one in-flight fetch. Every `start`
bumps a generation counter; a fetch only applies its outcome while its
captured generation is still current, so a slow superseded response can
never overwrite a newer one. Superseded tasks are also cancelled, which
stops the network round trip at its next await point.

All methods must be called on the event loop that runs the fetches.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Callable

from openai_async_image.common.errors import Cancelled, map_load_error
from openai_async_image.common.schema import ImageModel, ImageSize
from openai_async_image.common.state import Failed, Loaded, Loading, LoadState
from openai_async_image.loader.client import ImageLoader

LOGGER = logging.getLogger("openai_async_image.view.controller")

Listener = Callable[[LoadState], None]

def _caller_cancelled() -> bool:
    """True when the awaiting task itself has a pending cancel request (3.11+)."""
    current = asyncio.current_task()
    cancelling = getattr(current, "cancelling", None)
    return cancelling is not None and cancelling() > 0

class LoadController:
    """
    Drive one loader on behalf of a single consumer.

    Args:
        loader: Fetch client used for every `start`.
        clear_on_restart: Reset to Loading as soon as `start` runs. When False
            the previous result stays visible until the new one lands.
    """

    def __init__(self, loader: ImageLoader, *, clear_on_restart: bool = True) -> None:
        self.loader = loader
        self.clear_on_restart = clear_on_restart
        self._state: LoadState = Loading()
        self._task: asyncio.Task[None] | None = None
        self._generation = 0
        self._listeners: list[Listener] = []

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def add_listener(self, callback: Listener) -> Callable[[], None]:
        """Call `callback(state)` after every transition. Returns a remover."""
        self._listeners.append(callback)

        def remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return remove

    def start(
        self,
        prompt: str,
        size: ImageSize = ImageSize.DPI256,
        model: ImageModel = ImageModel.DALL_E_2,
    ) -> None:
        """Supersede any running fetch and begin a new one for `prompt`."""
        self._cancel_task()
        self._generation += 1
        generation = self._generation
        LOGGER.debug("start generation=%s size=%s model=%s", generation, size.value, model.value)
        self._task = asyncio.get_running_loop().create_task(
            self._run(generation, prompt, size, model),
            name=f"openai-async-image-{generation}",
        )
        if self.clear_on_restart:
            self._set_state(Loading())

    def cancel(self) -> None:
        """Stop the in-flight fetch, if any. The current state is kept."""
        if self._cancel_task():
            LOGGER.debug("cancel generation=%s", self._generation)
        self._generation += 1

    async def wait(self) -> LoadState:
        """Wait until the current fetch settles, following any newer `start`."""
        while self._task is not None and not self._task.done():
            task = self._task
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if _caller_cancelled() or task is self._task or not task.cancelled():
                    raise
        return self._state

    def _cancel_task(self) -> bool:
        task, self._task = self._task, None
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def _run(self, generation: int, prompt: str, size: ImageSize, model: ImageModel) -> None:
        try:
            image = await self.loader.load(prompt, size, model)
        except asyncio.CancelledError:
            LOGGER.debug("generation=%s cancelled", generation)
            raise
        except Exception as e:
            error = map_load_error(e)
            if isinstance(error, Cancelled) or not self._is_current(generation):
                LOGGER.debug("generation=%s discarded: %s", generation, error)
                return
            LOGGER.warning("Image load failed: %s", error)
            self._set_state(Failed(error))
            return

        if not self._is_current(generation):
            LOGGER.debug("generation=%s discarded stale image", generation)
            return
        self._set_state(Loaded(image))

    def _set_state(self, state: LoadState) -> None:
        self._state = state
        for callback in list(self._listeners):
            try:
                callback(state)
            except Exception:
                LOGGER.exception("State listener failed")
