from __future__ import annotations

from typing import Any, Protocol


class CompletionPort(Protocol):
    async def ask(self, assistant_id: str, text: str, session: Any) -> str: ...
