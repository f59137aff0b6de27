from __future__ import annotations

import pytest

from agent.agent import build_chat_model, build_conversation_manager
from agent.core.memory import SessionState
from agent.core.prompt import SYSTEM_PROMPT
from config.settings import Settings, _optional_float, get_settings


def test_build_chat_model_requires_api_key(monkeypatch):
    monkeypatch.setattr(get_settings(), "google_api_key", None)

    with pytest.raises(RuntimeError, match="GOOGLE_API_KEY"):
        build_chat_model()


def test_build_conversation_manager_uses_shop_persona(fake_llm):
    manager = build_conversation_manager(llm=fake_llm)

    assert manager.system_instruction == SYSTEM_PROMPT
    assert manager.state() is SessionState.ACTIVE
    assert manager.llm is fake_llm


def test_system_prompt_lists_products():
    assert "The Sample Shop" in SYSTEM_PROMPT
    for name, price in [
        ("Sample Product 1", "$10.00"),
        ("Sample Product 2", "$20.00"),
        ("Sample Product 3", "$30.00"),
    ]:
        assert f"{name} ({price})" in SYSTEM_PROMPT


def test_settings_are_cached():
    assert get_settings() is get_settings()
    assert isinstance(get_settings(), Settings)


def test_optional_float_reads_env(monkeypatch):
    monkeypatch.setenv("MODEL_TIMEOUT", "12.5")
    assert _optional_float("MODEL_TIMEOUT") == 12.5

    monkeypatch.setenv("MODEL_TIMEOUT", "  ")
    assert _optional_float("MODEL_TIMEOUT") is None

    monkeypatch.delenv("MODEL_TIMEOUT")
    assert _optional_float("MODEL_TIMEOUT") is None


def test_build_conversation_manager_uses_session_cap(fake_llm, monkeypatch):
    monkeypatch.setattr(get_settings(), "max_sessions", 5)

    manager = build_conversation_manager(llm=fake_llm)

    assert manager.max_sessions == 5
