from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Any, Callable

import pytest

from assistant_gate.domain.models import Fragment, Task, UserId


class FakeSession:
    """Stand-in for aiogram's FSMContext."""

    def __init__(self, owner: str) -> None:
        self.owner = owner
        self.data: dict[str, Any] = {}

    async def get_data(self) -> dict[str, Any]:
        return dict(self.data)

    async def update_data(self, data: dict[str, Any] | None = None, **kwargs: Any) -> dict[str, Any]:
        self.data.update(data or {}, **kwargs)
        return dict(self.data)


class Outbox:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self.signals: defaultdict[str, int] = defaultdict(int)

    def reply_for(self, user_id: str):
        async def _reply(fragments: list[Fragment]) -> None:
            for fragment in fragments:
                self.sent.append((user_id, fragment.body))

        return _reply

    def signal_for(self, user_id: str):
        async def _signal() -> None:
            self.signals[user_id] += 1

        return _signal

    def bodies(self, user_id: str) -> list[str]:
        return [body for uid, body in self.sent if uid == user_id]


class ScriptedCompletion:
    """Completion fake that records calls and per-user concurrency."""

    def __init__(self, answer: Callable[[str], str] = lambda text: f"re: {text}", delay: float = 0.0) -> None:
        self._answer = answer
        self._delay = delay
        self.calls: list[tuple[str, str]] = []
        self.in_flight: defaultdict[str, int] = defaultdict(int)
        self.max_in_flight: defaultdict[str, int] = defaultdict(int)

    async def ask(self, assistant_id: str, text: str, session: Any) -> str:
        owner = session.owner
        self.calls.append((owner, text))
        self.in_flight[owner] += 1
        self.max_in_flight[owner] = max(self.max_in_flight[owner], self.in_flight[owner])
        try:
            await asyncio.sleep(self._delay)
            return self._answer(text)
        finally:
            self.in_flight[owner] -= 1


@pytest.fixture
def outbox() -> Outbox:
    return Outbox()


@pytest.fixture
def make_task(outbox: Outbox):
    sessions: dict[str, FakeSession] = {}

    def _make(user_id: str, text: str) -> Task:
        session = sessions.setdefault(user_id, FakeSession(user_id))
        return Task(
            user_id=UserId(user_id),
            text=text,
            reply=outbox.reply_for(user_id),
            session=session,
            signal=outbox.signal_for(user_id),
        )

    return _make
