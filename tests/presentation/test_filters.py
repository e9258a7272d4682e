from types import SimpleNamespace

import pytest

from assistant_gate.presentation.filters import private_chat
from assistant_gate.presentation.routers import chat, common


@pytest.mark.parametrize(
    ("chat_type", "expected"),
    [("private", True), ("group", False), ("supergroup", False), ("channel", False)],
)
def test_private_chat_filter(chat_type: str, expected: bool) -> None:
    message = SimpleNamespace(chat=SimpleNamespace(type=chat_type))
    assert bool(private_chat.resolve(message)) is expected


@pytest.mark.parametrize("router", [chat.router, common.router], ids=["chat", "common"])
def test_routers_only_accept_private_chats(router) -> None:
    filters = router.message._handler.filters or []
    assert any(f.magic is private_chat for f in filters)
