import logging
import sys

from loguru import logger

# Third-party loggers and the floor they are held at; None follows LOG_LEVEL.
_LIBRARY_FLOORS = {
    "aiogram": None,
    "aiohttp": None,
    "asyncio": None,
    "openai": None,
    "httpx": logging.WARNING,  # one INFO line per request
}

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[source]}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Forward stdlib records into loguru, tagged with the stdlib logger name."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.bind(source=record.name).opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(*, level: str, json_lines: bool = False) -> None:
    """
    Route everything through a single loguru sink on stdout.

    Components log through stdlib loggers named after themselves
    (`task_queue`, `heartbeat`, `rate_limiter`...); that name is shown as the
    source. Direct loguru calls fall back to their module name.
    """
    logging.basicConfig(handlers=[InterceptHandler()], level=level, force=True)
    numeric = logging.getLevelName(level)
    for name, floor in _LIBRARY_FLOORS.items():
        logging.getLogger(name).setLevel(numeric if floor is None else max(numeric, floor))

    logger.remove()
    logger.configure(patcher=_default_source)
    if json_lines:
        logger.add(sys.stdout, level=level, serialize=True, backtrace=False, diagnose=False)
    else:
        logger.add(sys.stdout, level=level, format=_FORMAT, backtrace=True, diagnose=False)

    logger.debug("logging ready: level={} json={}", level, json_lines)


def _default_source(record) -> None:
    record["extra"].setdefault("source", record["name"] or "-")
