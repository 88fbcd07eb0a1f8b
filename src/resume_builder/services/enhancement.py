"""Server-side text enhancement: the fixed ATS rewriting prompt."""

from __future__ import annotations

from resume_builder.services.llm_providers import (
    GenerationSettings,
    LLMError,
    LLMProvider,
    provider_from_env,
)

__all__ = [
    "DEFAULT_FIELD_LABEL",
    "build_enhancement_instructions",
    "build_enhancement_prompt",
    "enhance_text",
]

DEFAULT_FIELD_LABEL = "content"


def build_enhancement_instructions(field: str | None = None) -> str:
    """Return the rewriting instruction for *field* (``content`` when unnamed)."""
    label = (field or "").strip() or DEFAULT_FIELD_LABEL
    return (
        "You are an ATS resume writing assistant. "
        f"Improve the following {label} for clarity, concision, and impact "
        "using active voice and quantifiable outcomes when possible. "
        "Keep it suitable for a fresher/B.Tech student resume. "
        "Return only the improved text without extra commentary."
    )


def build_enhancement_prompt(field: str | None, text: str) -> str:
    return f"{build_enhancement_instructions(field)}\n\nText:\n{text}"


def enhance_text(
    field: str | None,
    text: str,
    provider: LLMProvider | None = None,
    settings: GenerationSettings | None = None,
) -> str:
    """Rewrite *text* with the configured LLM and return the trimmed result.

    Raises:
        LLMError: If the provider is misconfigured, the call fails, or the
            model returns nothing.
    """
    provider = provider or provider_from_env()
    enhanced = provider.complete(
        build_enhancement_prompt(field, text), settings or GenerationSettings()
    ).strip()
    if not enhanced:
        raise LLMError("LLM returned an empty response")
    return enhanced
