"""Credential store — one opaque API key persisted under a fixed name.

The key lives in ``~/.codescribe/credentials.json`` (directory mode 0o700,
file mode 0o600). ``CODESCRIBE_API_KEY`` in the environment takes precedence
over the stored value and is never written to disk.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

CREDENTIAL_KEY = "api_key"
ENV_VAR = "CODESCRIBE_API_KEY"

_DEFAULT_PATH: Path = Path.home() / ".codescribe" / "credentials.json"


class CredentialStore:
    """File-backed key-value store holding the model API key.

    Args:
        path: JSON file location. Defaults to ``~/.codescribe/credentials.json``.
        use_env: Whether ``CODESCRIBE_API_KEY`` overrides the stored value.
    """

    def __init__(self, path: Path | None = None, use_env: bool = True) -> None:
        self.path = path if path is not None else _DEFAULT_PATH
        self._use_env = use_env

    def get(self) -> str | None:
        """Return the credential, or None if none is configured."""
        if self._use_env:
            env_value = os.environ.get(ENV_VAR, "").strip()
            if env_value:
                return env_value
        value = self._read().get(CREDENTIAL_KEY)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    def has_credential(self) -> bool:
        return self.get() is not None

    def set(self, value: str) -> None:
        """Persist *value* (stripped). Blank values are rejected."""
        value = value.strip()
        if not value:
            raise ValueError("API key must not be empty.")
        data = self._read()
        data[CREDENTIAL_KEY] = value
        self._write(data)

    def clear(self) -> bool:
        """Remove the stored credential. Returns True if one was removed."""
        data = self._read()
        if CREDENTIAL_KEY not in data:
            return False
        del data[CREDENTIAL_KEY]
        self._write(data)
        return True

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        self.path.chmod(0o600)
