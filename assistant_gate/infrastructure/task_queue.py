from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Dict

from assistant_gate.domain.models import Task, UserState
from assistant_gate.infrastructure.heartbeat import HeartbeatEmitter
from assistant_gate.infrastructure.user_store import UserStore


TaskHandler = Callable[[Task], Awaitable[None]]


class TaskQueue:
    """
    Per-user FIFO of pending tasks with exactly one drain worker per user.

    Users drain concurrently; tasks of one user never overlap. The heartbeat
    runs for the whole drain session, not per task: it starts once per drain.
    Nothing suspends between the final empty-queue check and the worker
    release, so a task never arrives into a closing session.

    Draining states are also tracked here, so a user whose state was evicted
    from the store mid-drain keeps a single worker.
    """

    def __init__(self, *, store: UserStore, heartbeat: HeartbeatEmitter, handler: TaskHandler) -> None:
        self._store = store
        self._heartbeat = heartbeat
        self._handler = handler
        self._draining: Dict[str, UserState] = {}
        self._workers: Dict[str, asyncio.Task[None]] = {}
        self._logger = logging.getLogger("task_queue")

    async def start(self) -> None:
        return

    async def stop(self) -> None:
        workers = list(self._workers.values())
        for worker in workers:
            worker.cancel()
        await asyncio.gather(*workers, return_exceptions=True)
        self._workers.clear()
        self._draining.clear()

    def enqueue(self, user_id: str, task: Task) -> int:
        """Append a task and start draining if nobody is. Returns the queue length."""
        state = self._draining.get(user_id)
        if state is None:
            state = self._store.get_or_create(user_id)
        if state.queue is None:
            state.queue = deque()
        state.queue.append(task)

        if not state.draining:
            state.draining = True
            self._draining[user_id] = state
            self._workers[user_id] = asyncio.create_task(self._drain(user_id, state), name=f"drain:{user_id}")
        return len(state.queue)

    def pending(self, user_id: str) -> int:
        state = self._draining.get(user_id) or self._store.get(user_id)
        if state is None or state.queue is None:
            return 0
        return len(state.queue)

    def is_draining(self, user_id: str) -> bool:
        return user_id in self._draining

    async def wait_idle(self) -> None:
        while self._workers:
            await asyncio.gather(*list(self._workers.values()), return_exceptions=True)

    async def _drain(self, user_id: str, state: UserState) -> None:
        self._logger.debug("drain started: user_id=%s", user_id)
        try:
            async with self._heartbeat.session(user_id, state.queue[0].signal):
                while state.queue:
                    task = state.queue.popleft()
                    try:
                        await self._handler(task)
                    except asyncio.CancelledError:
                        raise
                    except Exception:
                        self._logger.exception("task failed: user_id=%s", user_id)
        finally:
            dropped = len(state.queue) if state.queue else 0
            if dropped:
                self._logger.warning("drain interrupted: user_id=%s dropped=%s", user_id, dropped)
            state.queue = None
            state.draining = False
            self._draining.pop(user_id, None)
            self._workers.pop(user_id, None)
            self._logger.debug("drain finished: user_id=%s", user_id)
