from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, TypeVar

import openai
from openai import AsyncOpenAI

from assistant_gate.domain.errors import CompletionError


THREAD_KEY = "assistant_thread_id"

_T = TypeVar("_T")

_RETRIABLE = (
    openai.RateLimitError,
    openai.APITimeoutError,
    openai.APIConnectionError,
    openai.InternalServerError,
)


class AssistantClient:
    """
    OpenAI Assistants adapter.

    One thread per conversation; the thread id lives in the session handle
    (aiogram FSMContext or anything with get_data/update_data), so the
    assistant keeps context across messages of the same chat.

    Every API call is retried on its own (rate limit, timeout, connection,
    5xx) with exponential backoff, so a retry never posts the user message twice.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_sec: float,
        max_attempts: int,
        backoff_base_sec: float = 0.8,
        poll_interval_ms: int = 500,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or AsyncOpenAI(api_key=api_key, timeout=timeout_sec, max_retries=0)
        self._max_attempts = max_attempts
        self._backoff_base = backoff_base_sec
        self._poll_interval_ms = poll_interval_ms
        self._logger = logging.getLogger("assistant_client")

    async def start(self) -> None:
        return

    async def stop(self) -> None:
        await self._client.close()

    async def ask(self, assistant_id: str, text: str, session: Any) -> str:
        started = time.perf_counter()
        thread_id = await self._thread_id(session)

        await self._call(
            "message_create",
            lambda: self._client.beta.threads.messages.create(thread_id=thread_id, role="user", content=text),
        )
        run = await self._call(
            "run",
            lambda: self._client.beta.threads.runs.create_and_poll(
                thread_id=thread_id,
                assistant_id=assistant_id,
                poll_interval_ms=self._poll_interval_ms,
            ),
        )
        if run.status != "completed":
            raise CompletionError(f"assistant run ended with status={run.status}")

        page = await self._call(
            "message_list",
            lambda: self._client.beta.threads.messages.list(thread_id=thread_id, run_id=run.id, order="desc"),
        )
        answer = _extract_text(page.data)

        self._logger.info(
            "assistant answered: thread_id=%s run_id=%s chars=%d elapsed_ms=%.1f",
            thread_id,
            run.id,
            len(answer),
            (time.perf_counter() - started) * 1000,
        )
        return answer

    async def _thread_id(self, session: Any) -> str:
        data = await session.get_data()
        thread_id = data.get(THREAD_KEY)
        if thread_id:
            return thread_id
        thread = await self._call("thread_create", lambda: self._client.beta.threads.create())
        await session.update_data({THREAD_KEY: thread.id})
        self._logger.debug("assistant thread created: thread_id=%s", thread.id)
        return thread.id

    async def _call(self, purpose: str, fn: Callable[[], Awaitable[_T]]) -> _T:
        last_exc: Exception | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                return await fn()
            except _RETRIABLE as exc:
                last_exc = exc
                if attempt == self._max_attempts:
                    break
                sleep_for = self._backoff_base * (2 ** (attempt - 1))
                self._logger.warning(
                    "openai %s failed, retrying: attempt=%d sleep_sec=%.2f error=%s",
                    purpose,
                    attempt,
                    sleep_for,
                    exc,
                )
                await asyncio.sleep(sleep_for)
            except openai.OpenAIError as exc:
                raise CompletionError(f"openai {purpose} failed: {exc}") from exc
        raise CompletionError(f"openai {purpose} failed after {self._max_attempts} attempts") from last_exc


def _extract_text(messages: list[Any]) -> str:
    parts: list[str] = []
    for message in messages:
        if message.role != "assistant":
            continue
        for content in message.content:
            if content.type == "text":
                parts.append(content.text.value)
    # newest first from the API
    return "\n\n".join(reversed(parts))
