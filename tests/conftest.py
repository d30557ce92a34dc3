"""Shared pytest fixtures."""

from __future__ import annotations

import time
from dataclasses import dataclass

import pytest

from codescribe.credentials import CredentialStore


@dataclass
class FakeFile:
    """In-memory file handle with optional read latency or failure."""

    path: str
    content: str = ""
    delay: float = 0.0
    fail: bool = False

    @property
    def size(self) -> int:
        return len(self.content.encode("utf-8"))

    def read_text(self) -> str:
        if self.delay:
            time.sleep(self.delay)
        if self.fail:
            raise OSError(f"cannot read {self.path}")
        return self.content


@pytest.fixture(autouse=True)
def _isolate_user_files(tmp_path, monkeypatch):
    """Keep tests away from ~/.codescribe and the real CODESCRIBE_API_KEY."""
    home = tmp_path / "home"
    monkeypatch.setattr("codescribe.config._GLOBAL_CONFIG_PATH", home / "config.yaml")
    monkeypatch.setattr("codescribe.credentials._DEFAULT_PATH", home / "credentials.json")
    monkeypatch.delenv("CODESCRIBE_API_KEY", raising=False)
    monkeypatch.delenv("CODESCRIBE_GENERATION_MODEL", raising=False)
    monkeypatch.delenv("CODESCRIBE_CHAT_MODEL", raising=False)


@pytest.fixture
def make_file():
    """Factory for FakeFile handles."""
    return FakeFile


@pytest.fixture
def credential_store(tmp_path) -> CredentialStore:
    """Empty file-backed store in tmp_path."""
    return CredentialStore(tmp_path / "credentials.json", use_env=False)


@pytest.fixture
def keyed_store(credential_store) -> CredentialStore:
    """Store holding a test API key."""
    credential_store.set("test-key-123")
    return credential_store
