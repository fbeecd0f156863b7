"""Great Question research platform API client."""

from __future__ import annotations

import logging
from typing import Any

from uxrmetrics.core.exceptions import ExternalServiceError
from uxrmetrics.integration.base import ExternalProject, ResearchPlatformClient, parse_timestamp
from uxrmetrics.models import ApiService

logger = logging.getLogger(__name__)


class GreatQuestionClient(ResearchPlatformClient):
    """Client for the Great Question v1 REST API."""

    service = ApiService.GREAT_QUESTION
    default_base_url = "https://api.greatquestion.co"

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_token}"}

    def _to_project(self, item: Any) -> ExternalProject:
        if not isinstance(item, dict) or not item.get("id"):
            raise ExternalServiceError(
                "Great Question API returned an unexpected project payload",
                service=self.service.value,
            )
        participant_count = item.get("participant_count")
        return ExternalProject(
            external_id=str(item["id"]),
            name=item.get("name") or str(item["id"]),
            description=item.get("description"),
            created_at=parse_timestamp(item.get("created_at")),
            status=item.get("status"),
            participant_count=participant_count if isinstance(participant_count, int) else None,
        )

    async def list_projects(self) -> list[ExternalProject]:
        data = await self._get_json("/v1/projects")
        items = data.get("data") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise ExternalServiceError(
                "Great Question API returned an unexpected project list",
                service=self.service.value,
            )
        return [self._to_project(item) for item in items]

    async def get_project(self, external_id: str) -> ExternalProject:
        data = await self._get_json(f"/v1/projects/{external_id}")
        return self._to_project(data.get("data") if isinstance(data, dict) else None)

    async def get_metrics(self, external_id: str) -> dict[str, Any]:
        try:
            data = await self._get_json(f"/v1/projects/{external_id}/analytics")
        except ExternalServiceError as exc:
            logger.warning("Great Question analytics unavailable for %s: %s", external_id, exc)
            return {}
        result = data.get("data") if isinstance(data, dict) else None
        return result if isinstance(result, dict) else {}

    async def get_participant_count(self, external_id: str) -> int:
        """Count of participants enrolled in the project."""
        try:
            data = await self._get_json(f"/v1/projects/{external_id}/participants")
        except ExternalServiceError as exc:
            logger.warning("Great Question participants unavailable for %s: %s", external_id, exc)
            return 0
        participants = data.get("data") if isinstance(data, dict) else None
        return len(participants) if isinstance(participants, list) else 0
