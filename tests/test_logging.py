import json
import logging

import pytest
from loguru import logger

from assistant_gate.loader.logging import setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    logger.remove()
    logger.configure(patcher=lambda record: None)
    root.handlers[:] = handlers
    root.setLevel(level)


def _capture(**kwargs) -> list[str]:
    lines: list[str] = []
    logger.add(lines.append, **kwargs)
    return lines


def test_stdlib_records_carry_their_logger_name(restore_logging) -> None:
    setup_logging(level="INFO")
    lines = _capture(level="INFO", format="{extra[source]}|{level}|{message}")

    logging.getLogger("task_queue").warning("drain interrupted: user_id=%s dropped=%s", "u", 2)
    logger.info("direct call")

    assert lines[0].strip() == "task_queue|WARNING|drain interrupted: user_id=u dropped=2"
    assert lines[1].strip() == f"{__name__}|INFO|direct call"


def test_httpx_is_held_at_warning(restore_logging) -> None:
    setup_logging(level="DEBUG")

    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("aiogram").level == logging.DEBUG


def test_json_lines_sink(restore_logging, capsys) -> None:
    setup_logging(level="INFO", json_lines=True)

    logging.getLogger("heartbeat").error("signal failed")

    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])["record"]
    assert record["message"] == "signal failed"
    assert record["extra"]["source"] == "heartbeat"
