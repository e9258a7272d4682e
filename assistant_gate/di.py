from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Protocol, runtime_checkable

from aiogram import Bot

from .application.services import ChatService
from .application.use_cases.admit_message import AdmitMessageUseCase
from .config.settings import AppSettings, get_settings
from .constants import APP_NAME
from .infrastructure.assistant_client import AssistantClient
from .infrastructure.ban_gate import BanGate
from .infrastructure.heartbeat import HeartbeatEmitter
from .infrastructure.rate_limiter import RateLimiter
from .infrastructure.task_queue import TaskQueue
from .infrastructure.telegram_sender import TelegramSender
from .infrastructure.user_store import UserStore


class DIError(RuntimeError):
    pass


@runtime_checkable
class AsyncStartStop(Protocol):
    async def start(self) -> None: ...
    async def stop(self) -> None: ...


@dataclass(slots=True)
class Container:
    settings: AppSettings
    logger: logging.Logger
    _components: dict[str, Any]

    @classmethod
    def build(cls, settings: AppSettings | None = None) -> "Container":
        settings = settings or get_settings()
        logger = logging.getLogger(APP_NAME)
        return cls(settings=settings, logger=logger, _components={})

    def register(self, name: str, component: Any) -> None:
        if not name or not name.strip():
            raise DIError("Component name must be non-empty")
        if name in self._components:
            raise DIError(f"Component already registered: {name}")
        self._components[name] = component

    def get(self, name: str) -> Any:
        try:
            return self._components[name]
        except KeyError as exc:
            raise DIError(f"Unknown component: {name}") from exc

    def all_components(self) -> list[tuple[str, Any]]:
        return list(self._components.items())


def build_graph(container: Container) -> None:
    """
    Build the whole dependency graph.
    Any init error must crash at startup.
    """

    s = container.settings

    # Per-user state
    store = UserStore(capacity=s.user_store_capacity)
    ban_gate = BanGate(store=store)
    rate_limiter = RateLimiter(
        store=store,
        max_messages=s.max_messages,
        window_sec=s.rate_window_sec,
        notification_threshold=s.notification_threshold,
    )
    heartbeat = HeartbeatEmitter(interval_sec=s.heartbeat_interval_sec)

    # Transport / completion
    bot = Bot(token=s.bot_token)
    sender = TelegramSender(bot=bot)
    assistant = AssistantClient(
        api_key=s.openai_api_key,
        timeout_sec=s.openai_timeout_sec,
        max_attempts=s.openai_max_attempts,
    )

    # Queue -> handler wiring
    chat = ChatService(completion=assistant, assistant_id=s.assistant_id)
    queue = TaskQueue(store=store, heartbeat=heartbeat, handler=chat.handle_task)

    admit = AdmitMessageUseCase(
        ban_gate=ban_gate,
        rate_limiter=rate_limiter,
        queue=queue,
        ban_duration_sec=s.ban_duration_sec,
    )

    # Registration order is start order; shutdown runs in reverse.
    container.register("bot", bot)
    container.register("telegram_sender", sender)
    container.register("assistant_client", assistant)

    container.register("user_store", store)
    container.register("ban_gate", ban_gate)
    container.register("rate_limiter", rate_limiter)
    container.register("heartbeat", heartbeat)

    container.register("chat_service", chat)
    container.register("task_queue", queue)

    container.register("admit_message_uc", admit)
