from __future__ import annotations

from functools import partial

from aiogram import F, Router
from aiogram.fsm.context import FSMContext
from aiogram.types import Message
from loguru import logger

from assistant_gate.application.use_cases.admit_message import AdmitMessageUseCase
from assistant_gate.constants import MSG_BANNED, MSG_INTERNAL_ERROR, MSG_NEAR_LIMIT, MSG_TEXT_ONLY
from assistant_gate.domain.models import AdmissionStatus, Task, UserId
from assistant_gate.infrastructure.telegram_sender import TelegramSender
from assistant_gate.presentation.filters import private_chat
from assistant_gate.utils.text import format_hours

router = Router(name="chat")
router.message.filter(private_chat)


def build_task(message: Message, state: FSMContext, sender: TelegramSender) -> Task:
    chat_id = message.chat.id
    return Task(
        user_id=UserId(str(message.from_user.id)),
        text=message.text or "",
        reply=partial(sender.send_fragments, chat_id),
        session=state,
        signal=partial(sender.signal_typing, chat_id),
    )


@router.message(F.text & ~F.text.startswith("/"))
async def chat_handler(
    message: Message,
    state: FSMContext,
    admit: AdmitMessageUseCase,
    sender: TelegramSender,
) -> None:
    if message.from_user is None:
        return

    try:
        result = admit.execute(build_task(message, state, sender))
    except Exception:
        logger.exception("admission failed: user_id={}", message.from_user.id)
        await message.answer(MSG_INTERNAL_ERROR)
        return

    if result.status is AdmissionStatus.RATE_LIMITED:
        logger.info("user {} rate limited at count={}", message.from_user.id, result.count)
        await message.answer(MSG_BANNED.format(hours=format_hours(result.ban_duration)))
    elif result.warn_near_limit:
        await message.answer(MSG_NEAR_LIMIT.format(left=result.messages_left))


@router.message(~F.text)
async def non_text_handler(message: Message) -> None:
    await message.answer(MSG_TEXT_ONLY)
