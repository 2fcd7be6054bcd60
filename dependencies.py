"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. The objects themselves are built once in the
application lifespan and stored on app.state.
"""

from __future__ import annotations

from fastapi import Request

from config import AppSettings
from services.submission_pipeline import SubmissionPipeline


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


def get_pipeline(request: Request) -> SubmissionPipeline:
    """Return the shared SubmissionPipeline from app.state."""
    return request.app.state.pipeline
