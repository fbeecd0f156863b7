"""Shared dependencies for UXR Metrics web routes.

Dependencies are injected using FastAPI's Depends() system, which also lets
tests swap them through ``app.dependency_overrides``.

Usage:
    from fastapi import Depends
    from uxrmetrics.web.dependencies import get_upload_config

    @router.post("/api/upload")
    async def upload(uploads: UploadConfig = Depends(get_upload_config)):
        ...
"""

from __future__ import annotations

from uxrmetrics.config import UploadConfig, get_config
from uxrmetrics.integration.sync import ClientFactory, default_client_factory


def get_upload_config() -> UploadConfig:
    """Upload directory, public URL prefix and size limit."""
    return get_config().uploads


def get_client_factory() -> ClientFactory:
    """Factory building the API client for an external research platform."""
    return default_client_factory
