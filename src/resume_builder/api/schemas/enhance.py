"""Pydantic schemas for the text enhancement endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field


class EnhanceRequest(BaseModel):
    """Body of ``POST /api/enhance``; both keys are optional on the wire."""

    field: str | None = Field(
        default=None, description="Name of the resume field being rewritten"
    )
    text: str | None = Field(default=None, description="Text to rewrite")


class EnhanceResponse(BaseModel):
    """Successful enhancement."""

    enhanced: str = Field(description="Rewritten text, trimmed")


class ErrorResponse(BaseModel):
    """Error body returned by the enhancement endpoint."""

    error: str
