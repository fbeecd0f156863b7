"""External research platform integrations (Qualtrics, Great Question)."""

from __future__ import annotations

from uxrmetrics.config import IntegrationsConfig
from uxrmetrics.integration.base import ExternalProject, ResearchPlatformClient
from uxrmetrics.integration.great_question_client import GreatQuestionClient
from uxrmetrics.integration.qualtrics_client import QualtricsClient
from uxrmetrics.models import ApiService


def create_client(
    service: ApiService, api_token: str, config: IntegrationsConfig | None = None
) -> ResearchPlatformClient:
    """Build the API client for ``service`` using configured base URLs."""
    config = config or IntegrationsConfig()
    if service is ApiService.QUALTRICS:
        return QualtricsClient(
            api_token,
            base_url=config.qualtrics_base_url,
            timeout=config.http_timeout_seconds,
        )
    return GreatQuestionClient(
        api_token,
        base_url=config.great_question_base_url,
        timeout=config.http_timeout_seconds,
    )


__all__ = [
    "ExternalProject",
    "GreatQuestionClient",
    "QualtricsClient",
    "ResearchPlatformClient",
    "create_client",
]
