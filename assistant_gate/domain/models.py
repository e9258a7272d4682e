from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, NewType


UserId = NewType("UserId", str)


@dataclass(frozen=True, slots=True)
class Fragment:
    """One outgoing chat message."""

    body: str


Reply = Callable[[list[Fragment]], Awaitable[None]]
ActivitySignal = Callable[[], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class Task:
    """
    Unit of work for one inbound message.

    Carries everything the drain worker needs to answer without going back
    to the transport: the text, how to reply, the conversation session that
    is passed through to the completion service, and the activity signal
    used by the heartbeat.
    """

    user_id: UserId
    text: str
    reply: Reply
    session: Any
    signal: ActivitySignal


@dataclass(slots=True)
class UserState:
    message_count: int = 0
    window_start: float | None = None
    ban_until: float | None = None
    warned_near_limit: bool = False
    queue: Deque[Task] | None = None
    draining: bool = False

    @property
    def active(self) -> bool:
        return self.draining or bool(self.queue)


@dataclass(frozen=True, slots=True)
class RateDecision:
    allowed: bool
    count: int
    time_until_reset: float


class AdmissionStatus(str, Enum):
    QUEUED = "queued"
    BANNED = "banned"
    RATE_LIMITED = "rate_limited"
