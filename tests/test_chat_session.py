import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from agents.chat_agent import ChatMessage, ChatSession
from agents.chat_agent.agent import EMPTY_REPLY
from shared.errors import ChatError, ValidationError


class FakeLLM:
    """Records the messages it receives and replays queued outcomes."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def ainvoke(self, messages):
        self.calls.append(messages)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.mark.asyncio
async def test_send_appends_both_turns():
    llm = FakeLLM(AIMessage(content="Usa Zapier."), AIMessage(content="Sí, tiene plan gratuito."))
    chat = ChatSession(llm=llm)

    assert await chat.send("¿Cómo conecto mi CRM?") == "Usa Zapier."
    await chat.send("¿Es gratis?")

    assert [m.role for m in chat.history] == ["user", "model", "user", "model"]
    second_call = llm.calls[1]
    assert isinstance(second_call[0], SystemMessage)
    assert isinstance(second_call[1], HumanMessage)
    assert isinstance(second_call[2], AIMessage)
    assert second_call[-1].content == "¿Es gratis?"


@pytest.mark.asyncio
async def test_history_seeds_the_conversation():
    llm = FakeLLM(AIMessage(content="ok"))
    chat = ChatSession(history=[{"role": "user", "content": "hola"}, ChatMessage(role="model", content="buenas")], llm=llm)

    await chat.send("sigue")

    assert [m.content for m in llm.calls[0][1:]] == ["hola", "buenas", "sigue"]


@pytest.mark.asyncio
async def test_failure_resets_history():
    llm = FakeLLM(AIMessage(content="primera"), RuntimeError("503"))
    chat = ChatSession(llm=llm)
    await chat.send("uno")

    with pytest.raises(ChatError):
        await chat.send("dos")

    assert chat.history == []


@pytest.mark.asyncio
async def test_empty_reply_gets_placeholder():
    chat = ChatSession(llm=FakeLLM(AIMessage(content=[{"type": "text", "text": "  "}])))
    assert await chat.send("hola") == EMPTY_REPLY


@pytest.mark.asyncio
async def test_blank_message_is_rejected_without_calling_llm():
    llm = FakeLLM()
    chat = ChatSession(llm=llm)
    with pytest.raises(ValidationError):
        await chat.send("  ")
    assert llm.calls == []


def test_reset_clears_history():
    chat = ChatSession(history=[{"role": "user", "content": "hola"}], llm=FakeLLM())
    chat.reset()
    assert chat.history == []
