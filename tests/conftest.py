"""
Shared pytest configuration.

Puts the project root on sys.path and provides a recording fake chat model
so no test talks to the real Gemini API.
"""

import sys
from pathlib import Path
from typing import Any, List, Optional

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from fastapi.testclient import TestClient  # noqa: E402
from langchain_core.language_models import BaseChatModel  # noqa: E402
from langchain_core.messages import AIMessage, BaseMessage  # noqa: E402
from langchain_core.outputs import ChatGeneration, ChatResult  # noqa: E402
from pydantic import Field  # noqa: E402

from agent.core.memory import ConversationManager  # noqa: E402
from agent.core.prompt import SYSTEM_PROMPT  # noqa: E402
from app import mock_data  # noqa: E402
from app.main import app, conversation_manager  # noqa: E402


class RecordingChatModel(BaseChatModel):
    """
    Fake chat model that records every prompt it receives.

    Replies are taken from ``replies`` in order; once exhausted it echoes the
    last human message. Setting ``fail`` makes the next calls raise.
    """

    replies: List[str] = Field(default_factory=list)
    calls: List[List[BaseMessage]] = Field(default_factory=list)
    fail: bool = False

    @property
    def _llm_type(self) -> str:
        return "recording-fake"

    def _generate(
        self,
        messages: List[BaseMessage],
        stop: Optional[List[str]] = None,
        run_manager: Any = None,
        **kwargs: Any,
    ) -> ChatResult:
        self.calls.append(list(messages))
        if self.fail:
            raise ConnectionError("simulated Gemini outage")
        if self.replies:
            text = self.replies.pop(0)
        else:
            text = f"echo: {messages[-1].content}"
        return ChatResult(generations=[ChatGeneration(message=AIMessage(content=text))])


@pytest.fixture
def fake_llm() -> RecordingChatModel:
    return RecordingChatModel()


@pytest.fixture
def manager(fake_llm: RecordingChatModel) -> ConversationManager:
    return ConversationManager(llm=fake_llm, system_instruction=SYSTEM_PROMPT)


@pytest.fixture
def client(manager: ConversationManager):
    app.dependency_overrides[conversation_manager] = lambda: manager
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        mock_data.clear_cart()
