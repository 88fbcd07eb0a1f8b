"""FastAPI application entry point for the Resume Builder API."""

from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from resume_builder.api.routes import enhance, health

app = FastAPI(
    title="Resume Builder API",
    description="Server-side text enhancement for the resume builder",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(enhance.router, prefix="/api")


def main(host: str | None = None, port: int | None = None, reload: bool = False) -> None:
    """Start the development server."""
    import uvicorn

    uvicorn.run(
        "resume_builder.api.main:app",
        host=host or os.environ.get("RESUME_BUILDER_API_HOST", "127.0.0.1"),
        port=port or int(os.environ.get("RESUME_BUILDER_API_PORT", "8000")),
        reload=reload,
    )


if __name__ == "__main__":
    main()
