"""
FastAPI application factory for Video AI Detection.

Routes:
- / -> control page with live preview
- /api/* -> REST API (session control, policy, notifications, video, health)
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import pages, api


def create_app() -> FastAPI:
    """Create the FastAPI app and wire routes."""
    app = FastAPI(
        title="Video AI Detection",
        version="0.1.0",
        description="Object detection over local video files",
    )

    # CORS for local development frontends
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api.router, prefix="/api")
    app.include_router(pages.router)

    return app
