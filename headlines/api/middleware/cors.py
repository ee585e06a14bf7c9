"""
CORS middleware configuration.

Any origin in development, the ``Settings.cors_origins`` allowlist
otherwise. The API is anonymous, so credentials are never allowed.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from headlines.settings import Settings


def configure_cors(app: FastAPI, settings: Settings) -> None:
    """Add CORS middleware to the FastAPI application."""
    origins = ["*"] if settings.environment == "development" else settings.cors_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
    )
