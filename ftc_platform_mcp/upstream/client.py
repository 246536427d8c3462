from __future__ import annotations

import logging
from typing import Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from ftc_platform_mcp import __version__

from .errors import UpstreamApiError, UpstreamPayloadError
from .models import (
    ApiResponse,
    ApplicationQuestionsData,
    ClientStatus,
    ConnectionProbeData,
    EvaluationCriteriaData,
    EventApplicationsData,
    EventEvaluationsData,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_BASE_URL = "http://localhost:3000/api/mastra"


class PlatformApiClient:
    """
    Thin async HTTP client for the FTC Platform REST API.

    Responsibilities:
    - test_connection
    - get_event_applications
    - get_event_evaluations
    - get_evaluation_criteria
    - get_application_questions
    - get_status (configuration health, no network access)

    Every operation performs exactly one authenticated GET and either returns the
    typed ``data`` of the API envelope or raises `UpstreamApiError`.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key or ""
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "User-Agent": f"FTC-MCP-Server/{__version__}",
        }

    async def _get(self, endpoint: str, model: Type[ModelT]) -> ModelT:
        url = f"{self.base_url}{endpoint}"
        self._logger.debug("PlatformApiClient: GET %s", url)
        try:
            r = await self._client.get(url, headers=self._headers())
        except httpx.HTTPError as e:
            raise UpstreamApiError(f"API request failed: {e}", details=type(e).__name__) from e

        if not r.is_success:
            raise UpstreamApiError(
                f"API request failed: {r.status_code} {r.reason_phrase}\nResponse: {r.text}",
                status_code=r.status_code,
                details=r.text,
            )

        try:
            envelope = ApiResponse[model].model_validate(r.json())  # type: ignore[valid-type]
        except (ValueError, ValidationError) as e:
            raise UpstreamPayloadError(
                f"API returned an unexpected payload: {e}", details=r.text
            ) from e

        if not envelope.success:
            raise UpstreamPayloadError(
                f"API returned error: {envelope.error or 'Unknown error'}\nDetails: {envelope.details or 'No details'}",
                details=envelope.details,
            )
        if envelope.data is None:
            raise UpstreamPayloadError("API returned success but no data")

        self._logger.debug("PlatformApiClient: %s -> %s", endpoint, model.__name__)
        return envelope.data

    @staticmethod
    def _require_event_id(event_id: str) -> str:
        """Return the event id encoded as exactly one URL path segment."""
        if not event_id:
            raise UpstreamApiError("eventId is required")
        if event_id in (".", ".."):
            raise UpstreamApiError("eventId must not be a relative path segment")
        return quote(event_id, safe="")

    async def test_connection(self) -> ConnectionProbeData:
        """Probe the platform API."""
        return await self._get("/test", ConnectionProbeData)

    async def get_event_applications(self, event_id: str) -> EventApplicationsData:
        """Get all applications for a specific event."""
        event_id = self._require_event_id(event_id)
        return await self._get(f"/events/{event_id}/applications", EventApplicationsData)

    async def get_event_evaluations(self, event_id: str) -> EventEvaluationsData:
        """Get completed evaluations for applications in a specific event."""
        event_id = self._require_event_id(event_id)
        return await self._get(f"/events/{event_id}/evaluations", EventEvaluationsData)

    async def get_evaluation_criteria(self, event_id: str) -> EvaluationCriteriaData:
        """Get evaluation criteria for a specific event."""
        event_id = self._require_event_id(event_id)
        return await self._get(f"/events/{event_id}/criteria", EvaluationCriteriaData)

    async def get_application_questions(self, event_id: str) -> ApplicationQuestionsData:
        """Get application questions for a specific event."""
        event_id = self._require_event_id(event_id)
        return await self._get(f"/events/{event_id}/questions", ApplicationQuestionsData)

    def get_status(self) -> ClientStatus:
        """Report whether the client is properly configured."""
        return ClientStatus(
            configured=bool(self.base_url and self.api_key),
            base_url=self.base_url,
            has_api_key=bool(self.api_key),
        )

    async def aclose(self) -> None:
        await self._client.aclose()
