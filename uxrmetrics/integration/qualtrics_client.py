"""Qualtrics survey platform API client."""

from __future__ import annotations

import logging
from typing import Any

from uxrmetrics.core.exceptions import ExternalServiceError
from uxrmetrics.integration.base import ExternalProject, ResearchPlatformClient, parse_timestamp
from uxrmetrics.models import ApiService

logger = logging.getLogger(__name__)


class QualtricsClient(ResearchPlatformClient):
    """Client for the Qualtrics v3 REST API (surveys are imported as projects)."""

    service = ApiService.QUALTRICS
    default_base_url = "https://survey-platform.qualtrics.com"

    def _auth_headers(self) -> dict[str, str]:
        return {"X-API-TOKEN": self.api_token}

    def _to_project(self, survey: Any) -> ExternalProject:
        if not isinstance(survey, dict) or not survey.get("id"):
            raise ExternalServiceError(
                "Qualtrics API returned an unexpected survey payload",
                service=self.service.value,
            )
        return ExternalProject(
            external_id=str(survey["id"]),
            name=survey.get("name") or str(survey["id"]),
            created_at=parse_timestamp(survey.get("creationDate")),
            status="active" if survey.get("isActive") else "inactive",
        )

    async def list_projects(self) -> list[ExternalProject]:
        """List surveys visible to the token."""
        data = await self._get_json("/API/v3/surveys")
        try:
            elements = data["result"]["elements"]
        except (KeyError, TypeError) as exc:
            raise ExternalServiceError(
                "Qualtrics API returned an unexpected survey list", service=self.service.value
            ) from exc
        return [self._to_project(survey) for survey in elements]

    async def get_project(self, external_id: str) -> ExternalProject:
        data = await self._get_json(f"/API/v3/surveys/{external_id}")
        result = data.get("result") if isinstance(data, dict) else None
        return self._to_project(result)

    async def get_metrics(self, external_id: str) -> dict[str, Any]:
        try:
            data = await self._get_json(f"/API/v3/surveys/{external_id}/metrics")
        except ExternalServiceError as exc:
            logger.warning("Qualtrics metrics unavailable for %s: %s", external_id, exc)
            return {}
        result = data.get("result") if isinstance(data, dict) else None
        return result if isinstance(result, dict) else {}

    async def get_participant_count(self, external_id: str) -> int:
        """Number of auditable responses recorded for the survey."""
        try:
            data = await self._get_json(f"/API/v3/surveys/{external_id}/response-counts")
            return int(data["result"].get("auditable") or 0)
        except (ExternalServiceError, KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Qualtrics response count unavailable for %s: %s", external_id, exc)
            return 0
