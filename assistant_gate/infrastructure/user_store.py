from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Callable

from assistant_gate.domain.models import UserState


class UserStore:
    """
    Fixed-capacity user state cache with least-recently-used eviction.

    Responsibility:
      - hold one UserState per user id
      - keep at most `capacity` entries
      - evict idle users first; an active user (queued or draining) is only
        dropped when every entry is active

    The lock guards recency/capacity bookkeeping only and is never held
    across an await.
    """

    def __init__(self, *, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._entries: "OrderedDict[str, UserState]" = OrderedDict()
        self._lock = threading.Lock()
        self._logger = logging.getLogger("user_store")

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def has(self, user_id: str) -> bool:
        return user_id in self._entries

    def get(self, user_id: str) -> UserState | None:
        with self._lock:
            state = self._entries.get(user_id)
            if state is not None:
                self._entries.move_to_end(user_id)
            return state

    def set(self, user_id: str, state: UserState) -> None:
        with self._lock:
            if user_id in self._entries:
                self._entries[user_id] = state
                self._entries.move_to_end(user_id)
                return
            if len(self._entries) >= self._capacity:
                self._evict_one()
            self._entries[user_id] = state

    def get_or_create(self, user_id: str, factory: Callable[[], UserState] = UserState) -> UserState:
        state = self.get(user_id)
        if state is None:
            state = factory()
            self.set(user_id, state)
        return state

    def _evict_one(self) -> None:
        # Oldest first; prefer an idle entry.
        victim = next((uid for uid, st in self._entries.items() if not st.active), None)
        if victim is None:
            victim = next(iter(self._entries))
            self._logger.warning("evicting active user state: user_id=%s", victim)
        else:
            self._logger.debug("evicting idle user state: user_id=%s", victim)
        del self._entries[victim]
