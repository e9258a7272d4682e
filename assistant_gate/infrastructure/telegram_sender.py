from __future__ import annotations

import asyncio
import logging

from aiogram import Bot
from aiogram.enums import ChatAction
from aiogram.exceptions import TelegramNetworkError

from assistant_gate.domain.models import Fragment
from assistant_gate.utils.text import chunk_text


class TelegramSenderError(RuntimeError):
    pass


class TelegramSender:
    """
    Sends assistant replies and the typing indicator to Telegram.

    Each fragment becomes its own message, in order. Fragments over the
    Telegram size limit are cut on line/word boundaries.
    """

    def __init__(self, *, bot: Bot, attempts: int = 3) -> None:
        self._bot = bot
        self._attempts = attempts
        self._logger = logging.getLogger("telegram_sender")

    async def send_fragments(self, chat_id: int, fragments: list[Fragment]) -> None:
        for fragment in fragments:
            for chunk in chunk_text(fragment.body):
                await self._send_with_retry(chat_id, chunk)

    async def signal_typing(self, chat_id: int) -> None:
        await self._bot.send_chat_action(chat_id=chat_id, action=ChatAction.TYPING)

    async def _send_with_retry(self, chat_id: int, text: str) -> None:
        last_exc: Exception | None = None
        for attempt in range(self._attempts):
            try:
                await self._bot.send_message(chat_id=chat_id, text=text)
                return
            except TelegramNetworkError as exc:
                last_exc = exc
                self._logger.warning("send_message network error: chat_id=%s attempt=%d", chat_id, attempt + 1)
                await asyncio.sleep(1 + attempt)
        raise TelegramSenderError("Failed to send message (network error).") from last_exc
