"""Workflow controller — the single writer of workflow state.

States:
  IDLE ──start──▶ GENERATING ──document ok──▶ SUCCESS
                       └────────document failed──▶ ERROR
  SUCCESS / ERROR ──start──▶ GENERATING   (repeatable cycles)
  any ──clear_workspace──▶ IDLE           (atomic reset)

Sequencing: assemble → generate document → open chat session. The two remote
calls never overlap and a second ``start_generation()`` while GENERATING is a
no-op. Session creation failure does not fail the cycle; the workspace simply
has no chat until the next successful generation.

All mutable state lives in one Workspace object that is replaced wholesale on
reset, so corpus, document, session and transcript are never partly cleared.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import Enum

from codescribe.chat.models import ChatMessage, Role
from codescribe.chat.session import ChatSession, open_session
from codescribe.config import ChatCfg, CodescribeConfig, GenerationCfg
from codescribe.corpus.assembler import FileHandle, assemble
from codescribe.corpus.models import Corpus
from codescribe.credentials import CredentialStore
from codescribe.errors import MissingCredential, UpstreamFailure, WorkflowBusy
from codescribe.generate.document import GeneratedDocument, generate_document
from codescribe.generate.prompts import CHAT_GREETING, SEND_FAILURE_NOTICE

logger = logging.getLogger(__name__)

Generator = Callable[[str, str | None, GenerationCfg], GeneratedDocument]
SessionFactory = Callable[[str, str, str | None, ChatCfg], ChatSession]


class WorkflowState(str, Enum):
    IDLE = "IDLE"
    GENERATING = "GENERATING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class StartOutcome(str, Enum):
    STARTED = "started"
    BUSY = "busy"
    EMPTY_CORPUS = "empty_corpus"
    CREDENTIAL_REQUIRED = "credential_required"


@dataclass
class Workspace:
    corpus: Corpus = field(default_factory=Corpus)
    document: GeneratedDocument | None = None
    session: ChatSession | None = None
    transcript: list[ChatMessage] = field(default_factory=list)
    state: WorkflowState = WorkflowState.IDLE
    error: str | None = None


def error_markdown(message: str) -> str:
    """Render a generation failure where the document would have been."""
    return f"**System Error:** \n\n{message}"


class WorkflowController:
    """Sequences corpus assembly, document generation and chat bootstrap.

    Args:
        credentials: Store queried for the API key at the start of each cycle.
        config: Model and corpus settings.
        generator: Document generator (``generate_document`` by default).
        session_factory: Chat session factory (``open_session`` by default).
    """

    def __init__(
        self,
        credentials: CredentialStore,
        config: CodescribeConfig | None = None,
        *,
        generator: Generator = generate_document,
        session_factory: SessionFactory = open_session,
    ) -> None:
        self._credentials = credentials
        self._config = config or CodescribeConfig()
        self._generator = generator
        self._session_factory = session_factory
        self._workspace = Workspace()
        self._cycle = 0
        self._credential_listeners: list[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # Read-only view for the presentation layer
    # ------------------------------------------------------------------

    @property
    def state(self) -> WorkflowState:
        return self._workspace.state

    @property
    def corpus(self) -> Corpus:
        return self._workspace.corpus

    @property
    def document(self) -> GeneratedDocument | None:
        return self._workspace.document

    @property
    def session(self) -> ChatSession | None:
        return self._workspace.session

    @property
    def transcript(self) -> tuple[ChatMessage, ...]:
        return tuple(self._workspace.transcript)

    @property
    def error(self) -> str | None:
        return self._workspace.error

    @property
    def chat_available(self) -> bool:
        ws = self._workspace
        return ws.state is WorkflowState.SUCCESS and ws.session is not None

    def on_credential_required(self, listener: Callable[[], None]) -> None:
        """Register *listener* to be called when a cycle needs an API key."""
        self._credential_listeners.append(listener)

    # ------------------------------------------------------------------
    # Workspace lifecycle
    # ------------------------------------------------------------------

    def load(self, items: Iterable[FileHandle]) -> Corpus:
        """Assemble *items* into a fresh workspace and return the corpus.

        Raises:
            WorkflowBusy: If a generation cycle is in flight.
        """
        if self._workspace.state is WorkflowState.GENERATING:
            raise WorkflowBusy("Cannot load files while documentation is being generated.")
        cfg = self._config.corpus
        corpus = assemble(
            items,
            ignored_dirs=cfg.ignored_dirs,
            allowed_extensions=cfg.allowed_extensions,
            max_workers=cfg.max_workers,
        )
        self._reset(Workspace(corpus=corpus))
        return corpus

    def clear_workspace(self) -> None:
        """Drop corpus, document, session and transcript together; back to IDLE."""
        self._reset(Workspace())
        logger.debug("Workspace cleared")

    def _reset(self, workspace: Workspace) -> None:
        # Bumping the cycle makes any in-flight result stale.
        self._cycle += 1
        self._workspace = workspace

    def _is_current(self, cycle: int, workspace: Workspace) -> bool:
        return cycle == self._cycle and workspace is self._workspace

    # ------------------------------------------------------------------
    # Generation cycle
    # ------------------------------------------------------------------

    def start_generation(self, allow_empty: bool = False) -> StartOutcome:
        """Run one generation cycle.

        Args:
            allow_empty: Send a blank corpus to the model instead of refusing.

        Returns:
            STARTED once the cycle has finished (SUCCESS or ERROR), otherwise
            the reason nothing happened. Guards never change the state.
        """
        ws = self._workspace
        if ws.state is WorkflowState.GENERATING:
            return StartOutcome.BUSY
        if ws.corpus.is_empty and not allow_empty:
            return StartOutcome.EMPTY_CORPUS

        credential = self._credentials.get()
        if credential is None:
            self._request_credential()
            return StartOutcome.CREDENTIAL_REQUIRED

        self._cycle += 1
        cycle = self._cycle
        previous = replace(ws)
        ws.state = WorkflowState.GENERATING
        ws.document = None
        ws.session = None
        ws.transcript = []
        ws.error = None

        corpus_text = ws.corpus.text
        try:
            document = self._generator(corpus_text, credential, self._config.generation)
        except MissingCredential:
            # Nothing was generated; put the previous outputs back untouched.
            if self._is_current(cycle, ws):
                ws.state = previous.state
                ws.document = previous.document
                ws.session = previous.session
                ws.transcript = previous.transcript
                ws.error = previous.error
            self._request_credential()
            return StartOutcome.CREDENTIAL_REQUIRED
        except Exception as exc:
            message = exc.message if isinstance(exc, UpstreamFailure) else str(exc)
            message = message or "Unknown error occurred."
            logger.error("Document generation failed: %s", message)
            if self._is_current(cycle, ws):
                ws.document = GeneratedDocument(markdown=error_markdown(message))
                ws.error = message
                ws.state = WorkflowState.ERROR
            return StartOutcome.STARTED

        if not self._is_current(cycle, ws):
            logger.debug("Discarding document from an abandoned cycle")
            return StartOutcome.STARTED
        ws.document = document

        session = self._open_session(corpus_text, document.markdown, credential)
        if not self._is_current(cycle, ws):
            return StartOutcome.STARTED

        ws.session = session
        if session is not None:
            ws.transcript.append(ChatMessage(role=Role.MODEL, text=CHAT_GREETING))
        ws.state = WorkflowState.SUCCESS
        return StartOutcome.STARTED

    def _open_session(
        self, corpus_text: str, markdown: str, credential: str
    ) -> ChatSession | None:
        try:
            return self._session_factory(corpus_text, markdown, credential, self._config.chat)
        except Exception as exc:
            logger.warning("Chat session unavailable: %s", exc)
            return None

    def _request_credential(self) -> None:
        logger.info("API key required")
        for listener in list(self._credential_listeners):
            listener()

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    def send_message(self, text: str) -> ChatMessage | None:
        """Send *text* on the active session and return the model's reply.

        The user message is appended first; the reply (or a synthetic error
        notice if the send fails) follows it. Returns None without touching
        the transcript when *text* is blank or no session is open.
        """
        ws = self._workspace
        session = ws.session
        if session is None or not text.strip():
            return None

        ws.transcript.append(ChatMessage(role=Role.USER, text=text))
        try:
            answer = session.send(text)
        except Exception as exc:
            logger.warning("Chat message failed: %s", exc)
            reply = ChatMessage(role=Role.MODEL, text=SEND_FAILURE_NOTICE)
        else:
            reply = ChatMessage(role=Role.MODEL, text=answer)

        if ws is self._workspace:
            ws.transcript.append(reply)
        return reply
