import pytest

from assistant_gate.application.services import ChatService
from assistant_gate.constants import MSG_COMPLETION_FAILED
from tests.conftest import ScriptedCompletion


@pytest.mark.asyncio
async def test_answer_is_normalized_and_split_per_paragraph(make_task, outbox) -> None:
    answer = "Hola **amigo** [1].\n\nSegundo parrafo【4:0†source】 con **nota**."
    chat = ChatService(completion=ScriptedCompletion(answer=lambda _: answer), assistant_id="asst")

    await chat.handle_task(make_task("u", "hola"))

    assert outbox.bodies("u") == ["Hola *amigo* .", "Segundo parrafo con *nota*."]


@pytest.mark.asyncio
async def test_completion_receives_assistant_id_text_and_session(make_task) -> None:
    seen = {}

    class Recorder:
        async def ask(self, assistant_id, text, session):
            seen.update(assistant_id=assistant_id, text=text, session=session)
            return "ok"

    task = make_task("u", "pregunta")
    await ChatService(completion=Recorder(), assistant_id="asst_42").handle_task(task)

    assert seen == {"assistant_id": "asst_42", "text": "pregunta", "session": task.session}


@pytest.mark.asyncio
async def test_exception_becomes_generic_notice(make_task, outbox) -> None:
    def boom(_: str) -> str:
        raise RuntimeError("upstream 500")

    chat = ChatService(completion=ScriptedCompletion(answer=boom), assistant_id="asst")
    await chat.handle_task(make_task("u", "hola"))

    assert outbox.bodies("u") == [MSG_COMPLETION_FAILED]


@pytest.mark.asyncio
async def test_blank_answer_is_treated_as_failure(make_task, outbox) -> None:
    chat = ChatService(completion=ScriptedCompletion(answer=lambda _: "  [1]\n\n  "), assistant_id="asst")
    await chat.handle_task(make_task("u", "hola"))

    assert outbox.bodies("u") == [MSG_COMPLETION_FAILED]
