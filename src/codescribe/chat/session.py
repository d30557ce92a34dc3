"""Context-seeded chat sessions.

A ChatSession keeps the model-facing history locally and resends it with
every message, which makes it stateful from the caller's point of view.
``open_session()`` seeds that history with two synthetic turns — the corpus
plus generated document, and the model's acknowledgment — without a network
round trip, so the first real question already has the full project context.

History grows by exactly one user turn and one model turn per successful
``send()``; a failed send leaves it untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from codescribe.chat.models import Role, Turn
from codescribe.config import ChatCfg
from codescribe.errors import MessageSendFailure, SessionInitFailure
from codescribe.generate.document import require_credential
from codescribe.generate.prompts import (
    CHAT_SYSTEM_PROMPT,
    EMPTY_ANSWER_PLACEHOLDER,
    SEED_ACKNOWLEDGMENT,
    SEED_DOCUMENT_LEAD_IN,
    SEED_READY_REQUEST,
    SEED_SOURCE_LEAD_IN,
)
from codescribe.llm.client import complete

logger = logging.getLogger(__name__)


class ChatSession:
    """Conversation handle with two capabilities: initialize and send.

    Args:
        api_key: Credential used for every send.
        config: Chat model and temperature.
        system_prompt: System instruction prepended to every request.
    """

    def __init__(
        self,
        api_key: str,
        config: ChatCfg | None = None,
        system_prompt: str = CHAT_SYSTEM_PROMPT,
    ) -> None:
        self._api_key = api_key
        self._config = config or ChatCfg()
        self._system_prompt = system_prompt
        self._history: list[Turn] = []

    @property
    def history(self) -> tuple[Turn, ...]:
        return tuple(self._history)

    @property
    def model(self) -> str:
        return self._config.model

    def initialize(self, seed: Sequence[Turn]) -> None:
        """Load the seed turns into an empty session.

        Raises:
            SessionInitFailure: If the session already has history or the
                seed is not a user turn followed by a model turn.
        """
        if self._history:
            raise SessionInitFailure("Session history is already initialized.")
        if len(seed) != 2 or seed[0].role is not Role.USER or seed[1].role is not Role.MODEL:
            raise SessionInitFailure("Seed history must be one user turn then one model turn.")
        self._history.extend(seed)

    def send(self, message: str) -> str:
        """Send *message* with the full history; return the model's answer.

        Raises:
            MessageSendFailure: If the remote call raises. History is unchanged.
        """
        user_turn = Turn(role=Role.USER, parts=(message,))
        messages = [{"role": "system", "content": self._system_prompt}]
        messages.extend(turn.to_message() for turn in self._history)
        messages.append(user_turn.to_message())

        try:
            text = complete(
                model=self._config.model,
                messages=messages,
                api_key=self._api_key,
                temperature=self._config.temperature,
            )
        except Exception as exc:
            raise MessageSendFailure(str(exc) or exc.__class__.__name__) from exc

        answer = text if text.strip() else EMPTY_ANSWER_PLACEHOLDER
        self._history.append(user_turn)
        self._history.append(Turn(role=Role.MODEL, parts=(answer,)))
        return answer


def seed_turns(corpus_text: str, markdown: str) -> tuple[Turn, Turn]:
    """Build the user/model seed pair carrying the corpus and document."""
    user = Turn(
        role=Role.USER,
        parts=(
            SEED_SOURCE_LEAD_IN,
            corpus_text,
            SEED_DOCUMENT_LEAD_IN,
            markdown,
            SEED_READY_REQUEST,
        ),
    )
    model = Turn(role=Role.MODEL, parts=(SEED_ACKNOWLEDGMENT,))
    return user, model


def open_session(
    corpus_text: str,
    markdown: str,
    credential: str | None,
    config: ChatCfg | None = None,
) -> ChatSession:
    """Create a ChatSession pre-loaded with the corpus and generated document.

    Raises:
        MissingCredential: If *credential* is missing or blank.
        SessionInitFailure: If the session cannot be built.
    """
    api_key = require_credential(credential, "create a chat session")
    try:
        session = ChatSession(api_key, config)
        session.initialize(seed_turns(corpus_text, markdown))
    except SessionInitFailure:
        raise
    except Exception as exc:
        raise SessionInitFailure(str(exc)) from exc
    logger.debug("Opened chat session on %s", session.model)
    return session
