from __future__ import annotations

from aiogram import Router
from aiogram.types import ErrorEvent
from loguru import logger

from assistant_gate.constants import MSG_INTERNAL_ERROR

router = Router(name="errors")


@router.error()
async def error_handler(event: ErrorEvent) -> None:
    logger.opt(exception=event.exception).error("Error while handling update {}", event.update.update_id)

    # User-safe fallback
    message = event.update.message
    if message is None:
        return
    try:
        await message.answer(MSG_INTERNAL_ERROR)
    except Exception as e:
        logger.error("Failed to send error message: {}", e)
