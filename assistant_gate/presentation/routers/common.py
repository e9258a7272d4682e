from __future__ import annotations

from aiogram import Router
from aiogram.filters import Command, CommandStart
from aiogram.types import Message

from assistant_gate.constants import MSG_HELP, MSG_WELCOME
from assistant_gate.presentation.filters import private_chat

router = Router(name="common")
router.message.filter(private_chat)


@router.message(CommandStart())
async def start_handler(message: Message) -> None:
    await message.answer(MSG_WELCOME)


@router.message(Command("help"))
async def help_handler(message: Message) -> None:
    await message.answer(MSG_HELP)
