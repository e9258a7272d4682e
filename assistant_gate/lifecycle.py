from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .di import AsyncStartStop, Container, DIError, build_graph


class LifecycleError(RuntimeError):
    pass


@dataclass(slots=True)
class AppLifecycle:
    """
    Brings the component graph up and down.

    Components with start/stop run in registration order and stop in reverse,
    so the task queue cancels its drains before the heartbeat and the
    completion client go away. The bot session is closed last.
    """

    container: Container
    _running: list[str] = field(default_factory=list, init=False)
    _started: bool = field(default=False, init=False)
    _logger: logging.Logger = field(default_factory=lambda: logging.getLogger("lifecycle"), init=False)

    @property
    def started(self) -> bool:
        return self._started

    async def startup(self) -> None:
        if self._started:
            raise LifecycleError("startup() called twice")

        self._check_credentials()
        build_graph(self.container)

        for name, component in self.container.all_components():
            if not isinstance(component, AsyncStartStop):
                continue
            try:
                await component.start()
            except Exception as exc:
                self._logger.error("component %s failed to start; rolling back %s", name, self._running)
                await self._stop_running()
                await self._close_bot()
                raise LifecycleError(f"Component failed to start: {name}") from exc
            self._running.append(name)

        self._started = True
        self._logger.info("started components: %s", ", ".join(self._running) or "-")

    async def shutdown(self) -> None:
        if not self._started:
            return
        await self._stop_running()
        await self._close_bot()
        self._started = False
        self._logger.info("shutdown complete")

    def _check_credentials(self) -> None:
        s = self.container.settings
        missing = [
            env
            for env, value in (("ASSISTANT_ID", s.assistant_id), ("OPENAI_API_KEY", s.openai_api_key))
            if not value
        ]
        if missing:
            raise LifecycleError(f"Missing required settings: {', '.join(missing)}")

    async def _stop_running(self) -> None:
        while self._running:
            name = self._running.pop()
            component: Any = self.container.get(name)
            try:
                await component.stop()
            except Exception:
                self._logger.exception("component %s failed to stop", name)
            else:
                self._logger.debug("component %s stopped", name)

    async def _close_bot(self) -> None:
        try:
            bot = self.container.get("bot")
        except DIError:
            return
        await bot.session.close()
