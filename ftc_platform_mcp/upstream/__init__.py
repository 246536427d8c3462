from ftc_platform_mcp.upstream.models import (
    ApiResponse,
    ApplicationQuestionsData,
    ClientStatus,
    ConnectionProbeData,
    EvaluationCriteriaData,
    EventApplicationsData,
    EventEvaluationsData,
)

from .client import PlatformApiClient
from .errors import UpstreamApiError, UpstreamPayloadError

__all__ = [
    "PlatformApiClient",
    "ApiResponse",
    "ApplicationQuestionsData",
    "ClientStatus",
    "ConnectionProbeData",
    "EvaluationCriteriaData",
    "EventApplicationsData",
    "EventEvaluationsData",
    "UpstreamApiError",
    "UpstreamPayloadError",
]
