"""Codescribe configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (CODESCRIBE_GENERATION_MODEL, CODESCRIBE_CHAT_MODEL)
  3. Per-project codescribe.yaml  (in the directory being documented)
  4. Global ~/.codescribe/config.yaml  (model defaults only — no API keys)
  5. Hardcoded defaults

Config files must never contain API keys; the credential lives in the
credential store (see codescribe.credentials).
All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from codescribe.errors import ConfigError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".codescribe"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "codescribe.yaml"

# Matches: api_key, apikey, api-key, api_secret, _token (suffix), standalone token,
# standalone secret, _secret (suffix), password, passwd, credential(s).
# Does NOT match legitimate config keys like max_tokens or reasoning_budget.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(["generation", "chat", "corpus"])

DEFAULT_MODEL = "gemini/gemini-2.5-pro"

DEFAULT_IGNORED_DIRS: tuple[str, ...] = (
    "node_modules",
    ".git",
    "dist",
    "build",
    ".next",
    "coverage",
    ".idea",
    ".vscode",
)

DEFAULT_ALLOWED_EXTENSIONS: tuple[str, ...] = (
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    ".json",
    ".css",
    ".scss",
    ".html",
    ".md",
    ".sql",
    ".prisma",
    ".py",
    ".go",
    ".rs",
)


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class GenerationCfg:
    """Document generation settings (codescribe.yaml: generation:).

    Attributes:
        model: LiteLLM model string in 'provider/model' format.
        temperature: Sampling temperature; kept low for factual output.
        reasoning_budget: Thinking-token budget passed to the model.
            0 disables extended reasoning.
        max_tokens: Output cap; None leaves it to the provider.
    """

    model: str = DEFAULT_MODEL
    temperature: float = 0.2
    reasoning_budget: int = 4_096
    max_tokens: int | None = None


@dataclass
class ChatCfg:
    """Follow-up chat session settings (codescribe.yaml: chat:)."""

    model: str = DEFAULT_MODEL
    temperature: float = 0.4


@dataclass
class CorpusCfg:
    """File filtering for corpus assembly (codescribe.yaml: corpus:)."""

    ignored_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORED_DIRS))
    allowed_extensions: list[str] = field(
        default_factory=lambda: list(DEFAULT_ALLOWED_EXTENSIONS)
    )
    max_workers: int = 8


@dataclass
class CodescribeConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    generation: GenerationCfg = field(default_factory=GenerationCfg)
    chat: ChatCfg = field(default_factory=ChatCfg)
    corpus: CorpusCfg = field(default_factory=CorpusCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Config '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must not be stored in config files.\n"
                        f"  Remove '{full}' from {source.name} and run:\n"
                        f"    codescribe key set"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def normalize_extension(ext: str) -> str:
    """Return *ext* lowercased with exactly one leading dot ('PY' → '.py')."""
    ext = ext.strip().lower()
    if not ext:
        raise ConfigError("Empty file extension in corpus.allowed_extensions.")
    return ext if ext.startswith(".") else f".{ext}"


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


def _cfg_from_dict(data: dict[str, Any]) -> CodescribeConfig:
    """Build a *CodescribeConfig* from a merged raw YAML dict."""
    cfg = CodescribeConfig()

    if "generation" in data:
        g = data["generation"] or {}
        cfg.generation = GenerationCfg(
            model=str(g.get("model", cfg.generation.model)),
            temperature=float(g.get("temperature", cfg.generation.temperature)),
            reasoning_budget=int(
                g.get("reasoning_budget", cfg.generation.reasoning_budget)
            ),
            max_tokens=_optional_int(g.get("max_tokens", cfg.generation.max_tokens)),
        )

    if "chat" in data:
        c = data["chat"] or {}
        cfg.chat = ChatCfg(
            model=str(c.get("model", cfg.chat.model)),
            temperature=float(c.get("temperature", cfg.chat.temperature)),
        )

    if "corpus" in data:
        co = data["corpus"] or {}
        ignored = co.get("ignored_dirs", cfg.corpus.ignored_dirs)
        exts = co.get("allowed_extensions", cfg.corpus.allowed_extensions)
        if not isinstance(ignored, list) or not isinstance(exts, list):
            raise ConfigError(
                "corpus.ignored_dirs and corpus.allowed_extensions must be lists."
            )
        max_workers = int(co.get("max_workers", cfg.corpus.max_workers))
        if max_workers < 1:
            raise ConfigError("corpus.max_workers must be >= 1.")
        cfg.corpus = CorpusCfg(
            ignored_dirs=[str(d).strip("/") for d in ignored],
            allowed_extensions=[normalize_extension(str(e)) for e in exts],
            max_workers=max_workers,
        )

    return cfg


def _apply_env_overrides(cfg: CodescribeConfig) -> CodescribeConfig:
    """Apply CODESCRIBE_* environment variable overrides (layer 2)."""
    if model := os.environ.get("CODESCRIBE_GENERATION_MODEL"):
        cfg.generation.model = model
    if model := os.environ.get("CODESCRIBE_CHAT_MODEL"):
        cfg.chat.model = model
    return cfg


def _read_yaml(path: Path) -> dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config '{path}' must contain a YAML mapping at the top level.")
    return raw


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> CodescribeConfig:
    """Load and return a merged *CodescribeConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *codescribe.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Returns:
        Fully merged *CodescribeConfig* with env var overrides applied.

    Raises:
        ConfigError: If any config layer contains API-key-like fields or
            malformed corpus settings.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    # Layer 1: global config
    if global_path.exists():
        raw_global = _read_yaml(global_path)
        _check_no_api_keys(raw_global, global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    # Layer 2: per-project config (often committed — same key ban applies)
    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = _read_yaml(project_cfg_path)
        _check_no_api_keys(raw_project, project_cfg_path)
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _cfg_from_dict(merged)

    # Layer 3: env var overrides
    return _apply_env_overrides(cfg)
