from __future__ import annotations

import logging
import time
from typing import Callable

from assistant_gate.application.dto import AdmissionResultDTO
from assistant_gate.domain.models import AdmissionStatus, Task
from assistant_gate.infrastructure.ban_gate import BanGate
from assistant_gate.infrastructure.rate_limiter import RateLimiter
from assistant_gate.infrastructure.task_queue import TaskQueue


class AdmitMessageUseCase:
    """
    Ban check -> rate limit -> enqueue.

    Runs without awaiting, so two messages of the same user can never
    interleave between the checks and the enqueue.
    """

    def __init__(
        self,
        *,
        ban_gate: BanGate,
        rate_limiter: RateLimiter,
        queue: TaskQueue,
        ban_duration_sec: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._bans = ban_gate
        self._limiter = rate_limiter
        self._queue = queue
        self._ban_duration = float(ban_duration_sec)
        self._clock = clock
        self._logger = logging.getLogger("admission")

    def execute(self, task: Task) -> AdmissionResultDTO:
        user_id = task.user_id
        now = self._clock()

        if self._bans.is_banned(user_id, now):
            self._logger.debug("dropping message from banned user: user_id=%s", user_id)
            return AdmissionResultDTO(status=AdmissionStatus.BANNED)

        decision = self._limiter.admit(user_id, now)
        if not decision.allowed:
            self._bans.ban(user_id, now, self._ban_duration)
            # The counter would still be saturated when a ban shorter than the window ends.
            self._limiter.restart_window(user_id, now + self._ban_duration)
            return AdmissionResultDTO(
                status=AdmissionStatus.RATE_LIMITED,
                count=decision.count,
                time_until_reset=decision.time_until_reset,
                ban_duration=self._ban_duration,
            )

        position = self._queue.enqueue(user_id, task)
        return AdmissionResultDTO(
            status=AdmissionStatus.QUEUED,
            count=decision.count,
            time_until_reset=decision.time_until_reset,
            warn_near_limit=self._limiter.claim_warning(user_id, decision.count),
            messages_left=max(0, self._limiter.max_messages - decision.count),
            queue_position=position,
        )
