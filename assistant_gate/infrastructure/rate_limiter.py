from __future__ import annotations

import logging

from assistant_gate.domain.models import RateDecision, UserState
from assistant_gate.infrastructure.user_store import UserStore


class RateLimiter:
    """
    Fixed-window message counter.

    Every user gets `max_messages` per `window_sec`, counted from the first
    message of the window. Bursts straddling a window boundary can reach
    twice the budget; that approximation is accepted.
    """

    def __init__(
        self,
        *,
        store: UserStore,
        max_messages: int,
        window_sec: float,
        notification_threshold: int,
    ) -> None:
        self._store = store
        self._max = max_messages
        self._window = float(window_sec)
        self._threshold = notification_threshold
        self._logger = logging.getLogger("rate_limiter")

    @property
    def max_messages(self) -> int:
        return self._max

    def admit(self, user_id: str, now: float) -> RateDecision:
        state = self._store.get_or_create(user_id)
        self._roll_window(state, now)

        if state.message_count >= self._max:
            self._logger.info("rate limit hit: user_id=%s count=%s", user_id, state.message_count)
            return RateDecision(allowed=False, count=state.message_count, time_until_reset=self._remaining(state, now))

        state.message_count += 1
        self._store.set(user_id, state)
        return RateDecision(allowed=True, count=state.message_count, time_until_reset=self._remaining(state, now))

    def claim_warning(self, user_id: str, count: int) -> bool:
        """True exactly once per window, for the message that reaches the threshold."""
        if count != self._threshold:
            return False
        state = self._store.get(user_id)
        if state is None or state.warned_near_limit:
            return False
        state.warned_near_limit = True
        return True

    def restart_window(self, user_id: str, start: float) -> None:
        """Open a fresh, empty window for the user at `start`."""
        state = self._store.get_or_create(user_id)
        state.message_count = 0
        state.window_start = start
        state.warned_near_limit = False

    def _roll_window(self, state: UserState, now: float) -> None:
        if state.window_start is None or now - state.window_start >= self._window:
            state.message_count = 0
            state.window_start = now
            state.warned_near_limit = False

    def _remaining(self, state: UserState, now: float) -> float:
        start = state.window_start if state.window_start is not None else now
        return max(0.0, self._window - (now - start))
