"""Document generator — one model call from corpus text to Markdown.

Exactly one request per invocation, no retries. A call that succeeds but
returns no text yields a placeholder document; a call that raises becomes
UpstreamFailure carrying the upstream message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from codescribe.config import GenerationCfg
from codescribe.errors import MissingCredential, UpstreamFailure
from codescribe.generate.prompts import DOC_INTRO, DOC_SYSTEM_PROMPT, NO_RESPONSE_PLACEHOLDER
from codescribe.llm.client import complete

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedDocument:
    markdown: str


def require_credential(credential: str | None, purpose: str) -> str:
    """Return the stripped *credential* or raise MissingCredential."""
    if credential is None or not credential.strip():
        raise MissingCredential(f"An API key is required to {purpose}.")
    return credential.strip()


def build_messages(corpus_text: str) -> list[dict]:
    """System instruction + one user turn: intro part, corpus part."""
    return [
        {"role": "system", "content": DOC_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": DOC_INTRO},
                {"type": "text", "text": corpus_text},
            ],
        },
    ]


def generate_document(
    corpus_text: str,
    credential: str | None,
    config: GenerationCfg | None = None,
) -> GeneratedDocument:
    """Generate a Markdown technical document from *corpus_text*.

    Args:
        corpus_text: Concatenated corpus. Empty text is sent as-is.
        credential: API key for the model provider.
        config: Model, temperature and reasoning budget.

    Raises:
        MissingCredential: If *credential* is missing or blank.
        UpstreamFailure: If the remote call raises.
    """
    api_key = require_credential(credential, "generate documentation")
    cfg = config or GenerationCfg()

    logger.info("Generating document with %s (%d characters)", cfg.model, len(corpus_text))
    try:
        text = complete(
            model=cfg.model,
            messages=build_messages(corpus_text),
            api_key=api_key,
            temperature=cfg.temperature,
            max_tokens=cfg.max_tokens,
            reasoning_budget=cfg.reasoning_budget,
        )
    except Exception as exc:
        raise UpstreamFailure(str(exc) or exc.__class__.__name__) from exc

    if not text.strip():
        logger.warning("Model returned no text; using placeholder document")
        return GeneratedDocument(markdown=NO_RESPONSE_PLACEHOLDER)
    return GeneratedDocument(markdown=text)
