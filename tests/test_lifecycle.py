from unittest.mock import AsyncMock

import pytest

from assistant_gate.application.use_cases.admit_message import AdmitMessageUseCase
from assistant_gate.config.settings import AppSettings
from assistant_gate.di import Container, DIError
from assistant_gate.infrastructure.heartbeat import HeartbeatEmitter
from assistant_gate.infrastructure.task_queue import TaskQueue
from assistant_gate.lifecycle import AppLifecycle, LifecycleError


def _settings(**overrides) -> AppSettings:
    params = dict(
        BOT_TOKEN="123456:ABCDEF",
        ASSISTANT_ID="asst_test",
        OPENAI_API_KEY="sk-test",
        _env_file=None,
    )
    params.update(overrides)
    return AppSettings(**params)


def test_container_rejects_duplicates_and_unknown_names() -> None:
    container = Container.build(_settings())
    container.register("thing", object())

    with pytest.raises(DIError):
        container.register("thing", object())
    with pytest.raises(DIError):
        container.get("missing")


@pytest.mark.asyncio
async def test_startup_wires_graph_and_shutdown_stops_components() -> None:
    container = Container.build(_settings())
    lifecycle = AppLifecycle(container=container)

    await lifecycle.startup()
    try:
        assert lifecycle.started
        assert isinstance(container.get("admit_message_uc"), AdmitMessageUseCase)
        assert isinstance(container.get("task_queue"), TaskQueue)
        assert container.get("user_store").capacity == 1000
    finally:
        await lifecycle.shutdown()

    assert not lifecycle.started


@pytest.mark.asyncio
async def test_startup_twice_is_an_error() -> None:
    container = Container.build(_settings())
    lifecycle = AppLifecycle(container=container)
    await lifecycle.startup()
    try:
        with pytest.raises(LifecycleError):
            await lifecycle.startup()
    finally:
        await lifecycle.shutdown()


@pytest.mark.asyncio
async def test_missing_assistant_id_fails_preflight() -> None:
    lifecycle = AppLifecycle(container=Container.build(_settings(ASSISTANT_ID="")))
    with pytest.raises(LifecycleError):
        await lifecycle.startup()


@pytest.mark.asyncio
async def test_missing_settings_are_all_reported() -> None:
    lifecycle = AppLifecycle(container=Container.build(_settings(ASSISTANT_ID="", OPENAI_API_KEY="")))
    with pytest.raises(LifecycleError, match="ASSISTANT_ID, OPENAI_API_KEY"):
        await lifecycle.startup()


@pytest.mark.asyncio
async def test_failed_start_stops_already_started_components(monkeypatch) -> None:
    heartbeat_stop = AsyncMock()
    monkeypatch.setattr(HeartbeatEmitter, "stop", heartbeat_stop)
    monkeypatch.setattr(TaskQueue, "start", AsyncMock(side_effect=RuntimeError("boom")))
    container = Container.build(_settings())
    lifecycle = AppLifecycle(container=container)

    with pytest.raises(LifecycleError, match="task_queue"):
        await lifecycle.startup()

    assert not lifecycle.started
    heartbeat_stop.assert_awaited_once()
