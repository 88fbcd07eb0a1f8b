"""Liveness route."""

from __future__ import annotations

from fastapi import APIRouter

from resume_builder.services.llm_providers import GeminiProvider

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check() -> dict[str, str]:
    """Report that the API is up and whether enhancement can reach a provider."""
    return {
        "status": "healthy",
        "enhancement": "available" if GeminiProvider.is_configured() else "unconfigured",
    }
