from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Iterable, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

# Load dotenv files early so test fixtures can read settings via os.getenv
try:  # pragma: no cover
    from dotenv import load_dotenv

    TEST_ROOT = Path(__file__).resolve().parent
    load_dotenv(TEST_ROOT / ".env", override=False)
except ImportError:
    pass

from ftc_platform_mcp.server.core.config import Settings
from ftc_platform_mcp.upstream import (
    ApplicationQuestionsData,
    ClientStatus,
    ConnectionProbeData,
    EvaluationCriteriaData,
    EventApplicationsData,
    EventEvaluationsData,
)

FIXED_TIMESTAMP = "2025-01-01T00:00:00.000Z"
EVENT_ID = "11111111-1111-1111-1111-111111111111"


class StubPlatformApiClient:
    """In-memory stand-in for `PlatformApiClient` recording every upstream call."""

    def __init__(self, *, base_url: str = "http://mock/api/mastra", api_key: Optional[str] = "test-key") -> None:
        self.base_url = base_url
        self.api_key = api_key or ""
        self.calls: List[Tuple[str, Optional[str]]] = []
        self.failures: Dict[str, Exception] = {}
        self.delay: float = 0.0
        self.closed = False

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def fail(self, operation: str, error: Exception) -> None:
        self.failures[operation] = error

    def recover(self, operation: str) -> None:
        self.failures.pop(operation, None)

    async def _record(self, operation: str, event_id: Optional[str] = None) -> None:
        self.calls.append((operation, event_id))
        if self.delay:
            await asyncio.sleep(self.delay)
        else:
            await asyncio.sleep(0)
        if operation in self.failures:
            raise self.failures[operation]

    async def test_connection(self) -> ConnectionProbeData:
        await self._record("test_connection")
        return ConnectionProbeData(success=True, message="Connection successful", timestamp=FIXED_TIMESTAMP)

    async def get_event_applications(self, event_id: str) -> EventApplicationsData:
        await self._record("get_event_applications", event_id)
        return EventApplicationsData.model_validate(
            {"eventId": event_id, "applications": [{"id": f"app-{event_id}"}], "totalCount": 1}
        )

    async def get_event_evaluations(self, event_id: str) -> EventEvaluationsData:
        await self._record("get_event_evaluations", event_id)
        return EventEvaluationsData.model_validate({"eventId": event_id, "evaluations": []})

    async def get_evaluation_criteria(self, event_id: str) -> EvaluationCriteriaData:
        await self._record("get_evaluation_criteria", event_id)
        return EvaluationCriteriaData.model_validate({"eventId": event_id, "criteria": []})

    async def get_application_questions(self, event_id: str) -> ApplicationQuestionsData:
        await self._record("get_application_questions", event_id)
        return ApplicationQuestionsData.model_validate({"eventId": event_id, "questions": []})

    def get_status(self) -> ClientStatus:
        return ClientStatus(
            configured=bool(self.base_url and self.api_key),
            base_url=self.base_url,
            has_api_key=bool(self.api_key),
        )

    async def aclose(self) -> None:
        self.closed = True


def initialize_body(request_id: Any = 1, protocol_version: str = "2024-11-05") -> Dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "initialize",
        "params": {
            "protocolVersion": protocol_version,
            "capabilities": {},
            "clientInfo": {"name": "test-client", "version": "1.0.0"},
        },
    }


def call_tool_body(request_id: Any, name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "tools/call",
        "params": {"name": name, "arguments": arguments if arguments is not None else {}},
    }


@pytest.fixture
def stub_api_client() -> StubPlatformApiClient:
    return StubPlatformApiClient()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        VERCEL_API_BASE_URL="http://mock/api/mastra",
        MASTRA_API_KEY="test-key",
        MCP_LOG_LEVEL="DEBUG",
    )


@pytest.fixture
def app(test_settings: Settings, stub_api_client: StubPlatformApiClient):
    from ftc_platform_mcp.server.main import create_app

    return create_app(test_settings, api_client=stub_api_client)  # type: ignore[arg-type]


@pytest_asyncio.fixture(name="client")
async def client_fixture(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client bound to the app; the lifespan is not run, sessions are torn down afterwards."""
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://localhost") as client:
        yield client
    await app.state.router.store.close_all()
    await app.state.router.store.stop()


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "http://0.0.0.0",
        "/",  # Allow relative paths (used by ASGI transport)
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)


@pytest.fixture
def make_initialize():
    return initialize_body


@pytest.fixture
def make_call_tool():
    return call_tool_body
