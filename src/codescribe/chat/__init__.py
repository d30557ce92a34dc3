"""Codescribe chat — context-seeded follow-up sessions."""

from codescribe.chat.models import ChatMessage, Role, Turn
from codescribe.chat.session import ChatSession, open_session, seed_turns

__all__ = [
    "ChatMessage",
    "ChatSession",
    "Role",
    "Turn",
    "open_session",
    "seed_turns",
]
