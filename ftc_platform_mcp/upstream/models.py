"""Pydantic models for payloads returned by the platform REST API.

Only the response envelope and the connection probe are modelled field by
field. Event payloads are kept opaque: they are validated as JSON objects,
keep every field the API sends and are rendered back as-is.
"""

from __future__ import annotations

from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope wrapping every platform API response."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    details: Optional[Any] = None


class ConnectionProbeData(BaseModel):
    """Payload of the platform's connection probe."""

    model_config = ConfigDict(extra="allow")

    success: bool = True
    message: str = ""
    timestamp: str


class EventPayload(BaseModel):
    """Opaque event-scoped payload (applications, evaluations, criteria, questions)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    event_id: Optional[str] = Field(default=None, alias="eventId")


class EventApplicationsData(EventPayload):
    """All applications of an event, with responses and metadata."""


class EventEvaluationsData(EventPayload):
    """Completed evaluations of an event, with reviewer statistics."""


class EvaluationCriteriaData(EventPayload):
    """Scoring rubric, weights and guidelines used by reviewers."""


class ApplicationQuestionsData(EventPayload):
    """Question set and metadata of an event's application form."""


class ClientStatus(BaseModel):
    """Configuration health flags of the API client."""

    model_config = ConfigDict(populate_by_name=True)

    configured: bool
    base_url: str = Field(alias="baseUrl")
    has_api_key: bool = Field(alias="hasApiKey")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
