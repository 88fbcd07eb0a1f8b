"""Text enhancement route.

Errors use a flat ``{"error": ...}`` body rather than FastAPI's
``{"detail": ...}`` so the client can read one shape for every failure.
The body is read by hand for the same reason: a body that is not JSON, not
an object, or carries a non-string ``text`` counts as missing text instead
of producing a 422 validation error.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from resume_builder.api.schemas.enhance import EnhanceRequest, EnhanceResponse, ErrorResponse
from resume_builder.services.enhancement import enhance_text
from resume_builder.services.llm_providers import GeminiProvider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["enhance"])

TextEnhancer = Callable[[str | None, str], str]


def get_text_enhancer() -> TextEnhancer:
    """Return the callable that rewrites text (overridden in tests)."""
    return enhance_text


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def parse_enhance_body(raw: bytes) -> EnhanceRequest:
    """Read ``field`` and ``text`` from a request body, keeping only strings."""
    try:
        data: Any = json.loads(raw) if raw.strip() else {}
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    return EnhanceRequest(
        field=data["field"] if isinstance(data.get("field"), str) else None,
        text=data["text"] if isinstance(data.get("text"), str) else None,
    )


@router.post(
    "/enhance",
    response_model=EnhanceResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Text is missing or blank"},
        500: {"model": ErrorResponse, "description": "Misconfiguration or provider failure"},
    },
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": EnhanceRequest.model_json_schema()}},
        }
    },
)
async def enhance(
    request: Request,
    enhancer: Annotated[TextEnhancer, Depends(get_text_enhancer)],
) -> EnhanceResponse | JSONResponse:
    """Rewrite a resume field with the configured LLM."""
    if not GeminiProvider.is_configured():
        logger.error("Enhancement requested but GEMINI_API_KEY is not set")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Missing GEMINI_API_KEY")

    payload = parse_enhance_body(await request.body())
    if not payload.text or not payload.text.strip():
        return _error(status.HTTP_400_BAD_REQUEST, "Text is required")

    try:
        enhanced = await run_in_threadpool(enhancer, payload.field, payload.text)
    except Exception as exc:  # noqa: BLE001
        # Only the exception type: the text and field may carry personal data.
        logger.error("Enhancement failed: %s", type(exc).__name__)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to enhance text")

    return EnhanceResponse(enhanced=enhanced.strip())


@router.api_route(
    "/enhance",
    methods=["GET", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
    include_in_schema=False,
)
def enhance_method_not_allowed() -> JSONResponse:
    return _error(
        status.HTTP_405_METHOD_NOT_ALLOWED,
        "Method Not Allowed",
        headers={"Allow": "POST"},
    )
