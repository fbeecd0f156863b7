"""Shared plumbing for the external research platform API clients."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import httpx

from uxrmetrics.core.exceptions import ExternalServiceError
from uxrmetrics.models import ApiService

logger = logging.getLogger(__name__)


@dataclass
class ExternalProject:
    """Platform-independent view of a survey/study on an external service."""

    external_id: str
    name: str
    description: str | None = None
    created_at: datetime | None = None
    status: str | None = None
    participant_count: int | None = None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse the ISO-8601 timestamps both platforms return; ``None`` if unusable."""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


class ResearchPlatformClient:
    """Base async client: one authenticated ``httpx.AsyncClient`` per instance.

    Subclasses implement ``list_projects``, ``get_project``, ``get_metrics``
    and ``get_participant_count``. Project list/detail failures raise
    ``ExternalServiceError``; metric and participant lookups degrade to an
    empty mapping / zero. Each call makes exactly one request.
    """

    service: ApiService
    default_base_url: str

    def __init__(
        self,
        api_token: str,
        base_url: str | None = None,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        if not api_token:
            raise ValueError(f"{self.service.display_name} API token is required")

        self.api_token = api_token
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self.client = http_client or httpx.AsyncClient(timeout=timeout)
        self.client.headers.update(self._auth_headers())
        self.client.headers["Content-Type"] = "application/json"

    def _auth_headers(self) -> dict[str, str]:
        raise NotImplementedError

    async def _get_json(self, path: str) -> Any:
        """GET ``path`` and decode JSON, mapping every failure to ExternalServiceError."""
        url = f"{self.base_url}{path}"
        try:
            response = await self.client.get(url)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise ExternalServiceError(
                f"{self.service.display_name} API error: {exc.response.status_code}",
                service=self.service.value,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            raise ExternalServiceError(
                f"{self.service.display_name} API request failed: {exc}",
                service=self.service.value,
            ) from exc
        except ValueError as exc:
            raise ExternalServiceError(
                f"{self.service.display_name} API returned invalid JSON",
                service=self.service.value,
            ) from exc

    async def list_projects(self) -> list[ExternalProject]:
        raise NotImplementedError

    async def get_project(self, external_id: str) -> ExternalProject:
        raise NotImplementedError

    async def get_metrics(self, external_id: str) -> dict[str, Any]:
        raise NotImplementedError

    async def get_participant_count(self, external_id: str) -> int:
        raise NotImplementedError

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> ResearchPlatformClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
