from __future__ import annotations

from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.memory import MemoryStorage

from assistant_gate.di import Container
from assistant_gate.presentation.middlewares.logging import LoggingMiddleware
from assistant_gate.presentation.routers.chat import router as chat_router
from assistant_gate.presentation.routers.common import router as common_router
from assistant_gate.presentation.routers.errors import router as errors_router


def build_dispatcher(container: Container) -> Dispatcher:
    dp = Dispatcher(storage=MemoryStorage())

    # Middlewares
    dp.message.middleware(LoggingMiddleware())

    # Routers
    dp.include_router(common_router)
    dp.include_router(chat_router)
    dp.include_router(errors_router)

    # Dependencies injection (aiogram 3: put in workflow data)
    dp.workflow_data.update(
        admit=container.get("admit_message_uc"),
        sender=container.get("telegram_sender"),
    )

    return dp


def build_dispatcher_and_bot(container: Container) -> tuple[Bot, Dispatcher]:
    bot: Bot = container.get("bot")
    return bot, build_dispatcher(container)
