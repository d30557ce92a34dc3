"""LiteLLM client wrapper — the single boundary to the remote model.

All generation and chat calls route through ``complete()``. Calls are
single-attempt (``num_retries=0``): a failure is reported to the caller,
which decides how to surface it. The API key is passed explicitly per call;
nothing is read from provider-specific environment variables here.
"""

from __future__ import annotations

import litellm

# Disable LiteLLM verbose logging unless explicitly enabled
litellm.suppress_debug_info = True
litellm.set_verbose = False  # type: ignore[assignment]


def complete(
    model: str,
    messages: list[dict],
    api_key: str,
    temperature: float = 0.0,
    max_tokens: int | None = None,
    reasoning_budget: int = 0,
    num_retries: int = 0,
) -> str:
    """Call litellm.completion() once. Returns the content string.

    Args:
        model: LiteLLM model string (provider/model format).
        messages: OpenAI-style message list (system/user/assistant).
        api_key: Credential forwarded to the provider.
        temperature: Sampling temperature.
        max_tokens: Maximum output tokens; omitted from the request if None.
        reasoning_budget: Thinking-token budget; 0 sends no thinking config.
        num_retries: Retries on transient errors. Defaults to none.

    Returns:
        The text content of the first choice ("" if the model returned none).

    Raises:
        Exception: Whatever LiteLLM raises; callers translate it.
    """
    kwargs: dict = {
        "model": model,
        "messages": messages,
        "api_key": api_key,
        "temperature": temperature,
        "num_retries": num_retries,
    }
    if max_tokens is not None:
        kwargs["max_tokens"] = max_tokens
    if reasoning_budget > 0:
        kwargs["thinking"] = {"type": "enabled", "budget_tokens": reasoning_budget}

    response = litellm.completion(**kwargs)
    if not response.choices:
        return ""
    return response.choices[0].message.content or ""


def count_tokens(model: str, text: str) -> int:
    """Count tokens in *text* for *model* using LiteLLM's provider-aware counter.

    Falls back to character-based approximation (4 chars ≈ 1 token) if the model
    is not supported by litellm.token_counter().
    """
    try:
        return litellm.token_counter(model=model, text=text)
    except Exception:
        return max(1, len(text) // 4)


def get_context_window(model: str) -> int:
    """Return the input context window for *model* in tokens (8192 if unknown)."""
    try:
        info = litellm.get_model_info(model)
        return info.get("max_input_tokens") or info.get("max_tokens") or 8192
    except Exception:
        pass

    _FALLBACK: dict[str, int] = {
        "gemini/gemini-2.5-pro": 1_048_576,
        "gemini/gemini-2.5-flash": 1_048_576,
        "openai/gpt-4o": 128_000,
        "openai/gpt-4o-mini": 128_000,
        "anthropic/claude-3-5-sonnet-20241022": 200_000,
    }
    return _FALLBACK.get(model, 8_192)
