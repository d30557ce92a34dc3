"""Codescribe error taxonomy.

Only UpstreamFailure ends a workflow cycle in the ERROR state. Every other
error is recovered where it is raised:

  MissingCredential   → caller prompts for a key, state unchanged
  SessionInitFailure  → logged, workflow still succeeds without chat
  MessageSendFailure  → synthetic error turn appended to the transcript
  FileReadFailure     → item dropped from the corpus
"""

from __future__ import annotations


class CodescribeError(Exception):
    """Base class for all codescribe errors."""


class ConfigError(CodescribeError, ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


class MissingCredential(CodescribeError):
    """No API key is available for a remote model call."""

    def __init__(self, message: str = "An API key is required to call the model.") -> None:
        super().__init__(message)


class UpstreamFailure(CodescribeError):
    """The document-generation call raised or returned nothing usable."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SessionInitFailure(CodescribeError):
    """A context-seeded chat session could not be created."""


class MessageSendFailure(CodescribeError):
    """A chat message could not be exchanged with the model."""


class FileReadFailure(CodescribeError):
    """A selected file could not be read as text."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Could not read '{path}': {reason}")
        self.path = path
        self.reason = reason


class WorkflowBusy(CodescribeError):
    """The workspace cannot change while a generation cycle is in flight."""
