"""Server-side conversation memory.

Each caller key (``client_id``) owns one ConversationSession holding the
system instruction and the accumulated turns. Callers that do not send a key
share the ``DEFAULT_SESSION_ID`` conversation.

A session is never repaired in place: an explicit reset or any failure of the
remote model call swaps in a brand new session and the old history is gone.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder


DEFAULT_SESSION_ID = "global"
DEFAULT_MAX_SESSIONS = 1000

FALLBACK_RESPONSE = (
    "Sorry, I am unable to respond right now. My memory has been reset. "
    "Please try your question again."
)
RESET_MESSAGE = "Chat history has been reset. Start a new conversation!"

logger = logging.getLogger("sample_shop.memory")


class SessionState(str, Enum):
    NOT_INITIALIZED = "not_initialized"
    ACTIVE = "active"


@dataclass(frozen=True)
class ChatReply:
    ok: bool
    text: str


def build_prompt(system_instruction: str) -> ChatPromptTemplate:
    # SystemMessage is not templated, so braces in the instruction are safe.
    return ChatPromptTemplate.from_messages(
        [
            SystemMessage(content=system_instruction),
            MessagesPlaceholder("chat_history", optional=True),
            ("human", "{input}"),
        ]
    )


def message_text(message: Any) -> str:
    """Flatten a chat model result into plain text.

    Gemini may answer with a list of content parts instead of a string.
    """
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: List[str] = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and isinstance(item.get("text"), str):
                parts.append(item["text"])
        return "".join(parts)
    raise ValueError(f"Unexpected chat model response: {content!r}")


class ConversationSession:
    def __init__(self, session_id: str, llm: BaseChatModel, system_instruction: str) -> None:
        self.session_id = session_id
        self.system_instruction = system_instruction
        self.history: List[BaseMessage] = []
        self._chain = build_prompt(system_instruction) | llm
        self._lock = threading.Lock()

    def send(self, text: str) -> str:
        """Send one user turn and return the reply.

        History is only extended after the model answered with text; a failed
        call or an empty answer (e.g. a safety block) leaves it untouched.
        """
        with self._lock:
            result = self._chain.invoke({"input": text, "chat_history": list(self.history)})
            reply = message_text(result)
            if not reply:
                raise ValueError("Chat model returned no text")
            self.history.append(HumanMessage(content=text))
            self.history.append(AIMessage(content=reply))
        return reply


class ConversationManager:
    """Keeps one active ConversationSession per client key.

    At most ``max_sessions`` sessions are held; the least recently used one is
    dropped when a new key would exceed that.
    """

    def __init__(
        self,
        llm: BaseChatModel,
        system_instruction: str,
        eager: bool = True,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.llm = llm
        self.system_instruction = system_instruction
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, ConversationSession] = OrderedDict()
        self._lock = threading.Lock()
        if eager:
            self.initialize()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _new_session(self, session_id: str) -> ConversationSession:
        return ConversationSession(session_id, self.llm, self.system_instruction)

    def initialize(self, session_id: str = DEFAULT_SESSION_ID) -> ConversationSession:
        logger.info("Initializing new chat session: client_id=%s", session_id)
        session = self._new_session(session_id)
        with self._lock:
            self._sessions[session_id] = session
            self._sessions.move_to_end(session_id)
            evicted = []
            while len(self._sessions) > self.max_sessions:
                evicted.append(self._sessions.popitem(last=False)[0])
        for key in evicted:
            logger.info("Evicted idle chat session: client_id=%s", key)
        return session

    def state(self, session_id: str = DEFAULT_SESSION_ID) -> SessionState:
        with self._lock:
            active = session_id in self._sessions
        return SessionState.ACTIVE if active else SessionState.NOT_INITIALIZED

    def get_session(self, session_id: str = DEFAULT_SESSION_ID) -> Optional[ConversationSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def history(self, session_id: str = DEFAULT_SESSION_ID) -> List[BaseMessage]:
        session = self.get_session(session_id)
        if session is None:
            return []
        return list(session.history)

    def _touch(self, session_id: str) -> Optional[ConversationSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._sessions.move_to_end(session_id)
            return session

    def send_message(self, text: str, session_id: str = DEFAULT_SESSION_ID) -> ChatReply:
        session = self._touch(session_id)
        if session is None:
            logger.info("No chat session for client_id=%s yet", session_id)
            session = self.initialize(session_id)

        try:
            reply = session.send(text)
        except Exception:
            logger.exception("Chat model call failed: client_id=%s", session_id)
            self._replace_failed(session)
            return ChatReply(ok=False, text=FALLBACK_RESPONSE)

        logger.info(
            "Chat reply: client_id=%s chars=%s turns=%s",
            session_id,
            len(reply),
            len(session.history) // 2,
        )
        return ChatReply(ok=True, text=reply)

    def reset_session(self, session_id: str = DEFAULT_SESSION_ID) -> str:
        self.initialize(session_id)
        return RESET_MESSAGE

    def _replace_failed(self, failed: ConversationSession) -> None:
        fresh = self._new_session(failed.session_id)
        with self._lock:
            if self._sessions.get(failed.session_id) is not failed:
                # A reset already swapped in a newer session; keep it.
                return
            self._sessions[failed.session_id] = fresh
        logger.info("Chat session reset after failure: client_id=%s", failed.session_id)
