from __future__ import annotations

import asyncio
import signal
from typing import Callable

import uvloop
from aiohttp import web
from loguru import logger

from .config.settings import get_settings
from .di import Container
from .lifecycle import AppLifecycle
from .loader.logging import setup_logging
from .loader.web import create_web_app
from .presentation.bot_factory import build_dispatcher_and_bot


def _install_signal_handlers(loop: asyncio.AbstractEventLoop, stop: Callable[[], None]) -> None:
    for s in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(s, stop)
        except NotImplementedError:
            # Fallback for platforms where add_signal_handler is not supported
            signal.signal(s, lambda signum, _frame: stop())


async def _run_polling(container: Container) -> None:
    bot, dp = build_dispatcher_and_bot(container)
    await bot.delete_webhook(drop_pending_updates=True)
    await dp.start_polling(bot, handle_signals=False)


async def _run_webhook(container: Container, stop_event: asyncio.Event) -> None:
    settings = container.settings
    bot, dp = build_dispatcher_and_bot(container)
    app = create_web_app(bot, dp, settings)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host=settings.webapp_host, port=settings.webapp_port)
    await site.start()
    logger.info("Webhook app listening on {}:{}", settings.webapp_host, settings.webapp_port)
    try:
        await stop_event.wait()
    finally:
        await runner.cleanup()


async def amain() -> None:
    settings = get_settings()
    setup_logging(level=settings.log_level, json_lines=settings.log_json)

    container = Container.build(settings)
    lifecycle = AppLifecycle(container=container)

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()
    _install_signal_handlers(loop, stop_event.set)

    await lifecycle.startup()

    if settings.webhook_url is None:
        logger.info("Starting long polling")
        runner = asyncio.create_task(_run_polling(container), name="polling")
    else:
        runner = asyncio.create_task(_run_webhook(container, stop_event), name="webhook")
    stop_task = asyncio.create_task(stop_event.wait(), name="stop_event")

    done, _ = await asyncio.wait({runner, stop_task}, return_when=asyncio.FIRST_COMPLETED)

    if stop_task in done and not runner.done():
        logger.info("stop requested; cancelling {}", runner.get_name())
        runner.cancel()

    try:
        await runner
    except asyncio.CancelledError:
        logger.info("{} cancelled", runner.get_name())
    finally:
        stop_task.cancel()
        await lifecycle.shutdown()


def main() -> None:
    uvloop.run(amain())


if __name__ == "__main__":
    main()
