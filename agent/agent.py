from __future__ import annotations

from functools import lru_cache
from typing import Optional

from langchain_core.language_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI

from agent.core.memory import ConversationManager
from agent.core.prompt import SYSTEM_PROMPT
from config.settings import get_settings


def build_chat_model() -> ChatGoogleGenerativeAI:
    settings = get_settings()
    if not settings.google_api_key:
        raise RuntimeError(
            "GOOGLE_API_KEY not set. Please configure it in environment or .env"
        )

    return ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        google_api_key=settings.google_api_key,
        temperature=settings.temperature,
        top_p=settings.top_p,
        timeout=settings.request_timeout,
        max_retries=settings.max_retries,
    )


def build_conversation_manager(llm: Optional[BaseChatModel] = None) -> ConversationManager:
    if llm is None:
        llm = build_chat_model()
    return ConversationManager(
        llm=llm,
        system_instruction=SYSTEM_PROMPT,
        max_sessions=get_settings().max_sessions,
    )


@lru_cache(maxsize=1)
def get_conversation_manager() -> ConversationManager:
    return build_conversation_manager()
