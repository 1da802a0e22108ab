"""Shared test fixtures for the NextDNS dashboard proxy tests."""

import json
import os

# Add project root to path
import sys
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

TEST_API_KEY = "test-api-key"
TEST_BASE_URL = "https://api.nextdns.test"

Responder = Callable[[httpx.Request], httpx.Response]


# =============================================================================
# Simulated NextDNS upstream
# =============================================================================


class StubUpstream:
    """In-memory NextDNS stand-in served through httpx.MockTransport.

    Records every outbound request. Responses are registered per
    (method, path); unregistered routes answer 404.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._routes: Dict[Tuple[str, str], Responder] = {}
        self._fallback: Optional[Responder] = None

    def add(
        self,
        method: str,
        path: str,
        status_code: int = 200,
        json: Any = None,
        text: Optional[str] = None,
        responder: Optional[Responder] = None,
    ) -> None:
        if responder is None:
            responder = _fixed_response(status_code, json=json, text=text)
        self._routes[(method, path)] = responder

    def fail_everything(self, status_code: int = 503, text: str = "Service Unavailable") -> None:
        """Answer every request with the same error."""
        self._routes.clear()
        self._fallback = _fixed_response(status_code, text=text)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responder = self._routes.get((request.method, request.url.path), self._fallback)
        if responder is None:
            return httpx.Response(404, text="Not Found")
        return responder(request)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)


def _fixed_response(status_code: int, json: Any = None, text: Optional[str] = None) -> Responder:
    def respond(request: httpx.Request) -> httpx.Response:
        if text is not None:
            return httpx.Response(status_code, text=text)
        if json is not None:
            return httpx.Response(status_code, json=json)
        return httpx.Response(status_code)

    return respond


@pytest.fixture
def upstream():
    """Simulated NextDNS API."""
    return StubUpstream()


@pytest.fixture
def nextdns_client(upstream):
    """NextDNS client wired to the simulated upstream."""
    from nextdns_client import NextDNSClient

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    return NextDNSClient(TEST_API_KEY, base_url=TEST_BASE_URL, http_client=http_client)


@pytest.fixture
def sample_profile():
    """Sample NextDNS profile response."""
    return {
        "data": {
            "id": "abc123",
            "fingerprint": "fp0123456789abcdef",
            "name": "Home",
            "security": {"threatIntelligenceFeeds": True, "googleSafeBrowsing": False, "cryptojacking": True},
            "privacy": {"disguisedTrackers": True, "allowAffiliate": False},
            "parentalControl": {"safeSearch": True, "youtubeRestrictedMode": False},
        }
    }


@pytest.fixture
def flat_profile():
    """Sample profile without the `data` envelope."""
    return {
        "id": "abc123",
        "name": "Home",
        "security": {"threatIntelligenceFeeds": True, "cryptojacking": True},
        "privacy": {"disguisedTrackers": True},
        "parentalControl": {"safeSearch": True},
    }


@pytest.fixture
def sample_allowlist():
    """Sample NextDNS allowlist response."""
    return {"data": [{"id": "example.com", "active": True}, {"id": "nextdns.io", "active": False}]}


@pytest.fixture
def sample_analytics():
    """Sample NextDNS analytics status response."""
    return {
        "queries": 1200,
        "blocked": 140,
        "relayed": 3,
        "domains": [
            {"domain": "ads.example.com", "queries": 90, "blocked": 90},
            {"domain": "example.com", "queries": 60, "blocked": 0},
        ],
    }


@pytest.fixture
def sample_logs():
    """Sample NextDNS logs response."""
    return {
        "data": [
            {
                "timestamp": "2024-05-01T12:00:00.000Z",
                "domain": "ads.example.com",
                "type": "A",
                "status": 0,
                "clientId": "laptop",
            },
            {
                "timestamp": "2024-05-01T12:00:01.000Z",
                "domain": "example.com",
                "type": "AAAA",
                "status": 1,
                "clientId": "phone",
            },
        ],
        "meta": {"pagination": {"cursor": None}},
    }


# =============================================================================
# FastAPI TestClient Fixtures
# =============================================================================


@pytest.fixture
def app_no_lifespan(nextdns_client):
    """Create the API app without lifespan events, using the stub upstream."""
    from fastapi import FastAPI

    from server import include_routers, register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)
    include_routers(app)
    app.state.nextdns_client = nextdns_client
    return app


@pytest.fixture
def test_client(app_no_lifespan):
    """FastAPI TestClient talking to the stub upstream."""
    with TestClient(app_no_lifespan) as client:
        yield client
