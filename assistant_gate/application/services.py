from __future__ import annotations

import logging

from assistant_gate.application.ports import CompletionPort
from assistant_gate.constants import MSG_COMPLETION_FAILED
from assistant_gate.domain.errors import EmptyCompletionError
from assistant_gate.domain.models import Fragment, Task
from assistant_gate.utils.text import build_fragments


class ChatService:
    """
    Executes one queued task:
      ask the assistant -> normalize -> split into paragraphs -> reply in order.

    A failed completion turns into one generic notice; it never propagates,
    so the drain loop keeps going with the next task.
    """

    def __init__(self, *, completion: CompletionPort, assistant_id: str) -> None:
        self._completion = completion
        self._assistant_id = assistant_id
        self._logger = logging.getLogger("chat_service")

    async def handle_task(self, task: Task) -> None:
        try:
            answer = await self._completion.ask(self._assistant_id, task.text, task.session)
            fragments = build_fragments(answer or "")
            if not fragments:
                raise EmptyCompletionError("completion returned no text")
        except Exception:
            self._logger.exception("completion failed: user_id=%s", task.user_id)
            await task.reply([Fragment(body=MSG_COMPLETION_FAILED)])
            return

        for fragment in fragments:
            await task.reply([fragment])
