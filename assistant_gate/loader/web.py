from aiohttp import web
from aiogram import Bot, Dispatcher
from aiogram.webhook.aiohttp_server import SimpleRequestHandler, setup_application
from loguru import logger

from assistant_gate.config.settings import AppSettings


def webhook_target(settings: AppSettings) -> str:
    return str(settings.webhook_url).rstrip("/") + settings.webhook_path


def create_web_app(bot: Bot, dp: Dispatcher, settings: AppSettings) -> web.Application:
    app = web.Application()

    app["bot"] = bot
    app["dp"] = dp

    async def on_startup(app: web.Application) -> None:
        url = webhook_target(settings)
        await bot.set_webhook(
            url=url,
            allowed_updates=dp.resolve_used_update_types(),
            drop_pending_updates=True,
        )
        logger.info("Webhook set to {}", url)

    async def on_shutdown(app: web.Application) -> None:
        await bot.delete_webhook()
        logger.info("Webhook deleted")

    SimpleRequestHandler(
        dispatcher=dp,
        bot=bot,
    ).register(app, path=settings.webhook_path)

    async def health(request: web.Request) -> web.Response:
        return web.Response(text="ok")

    app.router.add_get("/health", health)

    app.on_startup.append(on_startup)
    app.on_shutdown.append(on_shutdown)

    setup_application(app, dp, bot=bot)

    return app
