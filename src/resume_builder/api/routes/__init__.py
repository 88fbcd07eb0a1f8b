"""Route handlers for the API."""

from resume_builder.api.routes import enhance, health

__all__ = [
    "enhance",
    "health",
]
