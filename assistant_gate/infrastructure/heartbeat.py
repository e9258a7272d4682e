from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Dict, Optional, Set

from assistant_gate.domain.models import ActivitySignal


@dataclass(slots=True)
class _Beat:
    task: asyncio.Task[None]
    stop: asyncio.Event


class HeartbeatEmitter:
    """Periodic "still working" signal per user.

    Guarantees:
      - at most one running loop per user id
      - stop_loop() cancels the loop and waits for it, so no signal is sent after it
        returns, even when the signal itself hangs
      - leaving session() detaches the loop without suspending
      - a failing signal never kills the loop
    """

    def __init__(self, *, interval_sec: float) -> None:
        self._interval = float(interval_sec)
        self._beats: Dict[str, _Beat] = {}
        self._detached: Set[asyncio.Task[None]] = set()
        self._logger = logging.getLogger("heartbeat")

    async def start(self) -> None:
        return

    async def stop(self) -> None:
        for user_id in list(self._beats):
            try:
                await self.stop_loop(user_id)
            except Exception:
                self._logger.exception("failed to stop heartbeat: user_id=%s", user_id)
        self._beats.clear()
        if self._detached:
            await asyncio.gather(*list(self._detached), return_exceptions=True)

    def is_running(self, user_id: str) -> bool:
        return user_id in self._beats

    def start_loop(self, user_id: str, signal: ActivitySignal) -> None:
        if user_id in self._beats:
            return
        stop = asyncio.Event()
        task = asyncio.create_task(self._loop(user_id, signal, stop), name=f"heartbeat:{user_id}")
        self._beats[user_id] = _Beat(task=task, stop=stop)

    def cancel_loop(self, user_id: str) -> Optional[asyncio.Task[None]]:
        """Stop the user's loop without waiting for it; returns the cancelled task."""
        beat = self._beats.pop(user_id, None)
        if beat is None:
            return None
        beat.stop.set()
        if not beat.task.done():
            beat.task.cancel()
            self._detached.add(beat.task)
            beat.task.add_done_callback(self._detached.discard)
        return beat.task

    async def stop_loop(self, user_id: str) -> None:
        task = self.cancel_loop(user_id)
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            return
        except Exception:
            self._logger.exception("heartbeat task failed: user_id=%s", user_id)

    @asynccontextmanager
    async def session(self, user_id: str, signal: ActivitySignal) -> AsyncIterator[None]:
        self.start_loop(user_id, signal)
        try:
            yield
        finally:
            # No await here: the caller's queue check and the session end stay atomic.
            self.cancel_loop(user_id)

    async def _loop(self, user_id: str, signal: ActivitySignal, stop: asyncio.Event) -> None:
        while not stop.is_set():
            try:
                await signal()
            except asyncio.CancelledError:
                raise
            except Exception:
                self._logger.exception("heartbeat signal failed; keeping loop alive: user_id=%s", user_id)
            try:
                await asyncio.wait_for(stop.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                continue
