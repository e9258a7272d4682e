from __future__ import annotations

import logging

from assistant_gate.infrastructure.user_store import UserStore


class BanGate:
    """
    Temporary suspension of abusive users.

    Expiry is observed lazily on lookup; nothing sweeps bans in the background.
    """

    def __init__(self, *, store: UserStore) -> None:
        self._store = store
        self._logger = logging.getLogger("ban_gate")

    def is_banned(self, user_id: str, now: float) -> bool:
        state = self._store.get(user_id)
        if state is None or state.ban_until is None:
            return False
        if state.ban_until <= now:
            state.ban_until = None
            self._logger.info("ban expired: user_id=%s", user_id)
            return False
        return True

    def ban(self, user_id: str, now: float, duration: float) -> None:
        state = self._store.get_or_create(user_id)
        state.ban_until = now + duration
        self._logger.warning("user banned: user_id=%s duration_sec=%s", user_id, duration)

    def ban_remaining(self, user_id: str, now: float) -> float:
        state = self._store.get(user_id)
        if state is None or state.ban_until is None:
            return 0.0
        return max(0.0, state.ban_until - now)
