"""
Pytest configuration and fixtures for test suite.
"""

import json
import os

import httpx
import pytest

# Set test environment variables before importing the app
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["PDL_API_KEY"] = "test_pdl_key"
os.environ["GOOGLE_PLACES_API_KEY"] = ""
os.environ["LOG_FORMAT"] = "console"
os.environ["LOG_LEVEL"] = "warning"

from fastapi.testclient import TestClient

from reva.config import Settings
from reva.core.cache import TTLCache
from reva.main import create_app
from reva.services.pdl_client import PDLClient


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start_ms: float = 1_700_000_000_000):
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms


class PDLStub:
    """
    httpx.MockTransport handler standing in for the PDL enrich endpoint.

    responses maps email -> (status_code, json body); unknown emails get a
    404 "no match" body. Every request is recorded in calls.
    """

    def __init__(self, responses: dict | None = None):
        self.responses = responses or {}
        self.calls: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append(body)
        status_code, payload = self.responses.get(
            body["email"],
            (404, {"status": 404, "error": {"type": "not_found", "message": "No records were found matching your request"}})
        )
        return httpx.Response(status_code, json=payload)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(clock=clock)


@pytest.fixture
def pdl_stub(sample_pdl_person_response):
    return PDLStub({"jane@brightco.com": (200, sample_pdl_person_response)})


@pytest.fixture
def pdl_client(settings, cache, pdl_stub):
    http_client = httpx.AsyncClient(
        base_url=settings.pdl_base_url,
        transport=httpx.MockTransport(pdl_stub)
    )
    return PDLClient(settings, cache, http_client=http_client)


@pytest.fixture
def app(settings, cache, pdl_client):
    return create_app(settings, cache=cache, pdl_client=pdl_client)


@pytest.fixture
def client(app):
    """FastAPI test client (lifespan runs, so tables exist)."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_pdl_person_response():
    """Successful PDL person enrich response."""
    return {
        "status": 200,
        "likelihood": 9,
        "data": {
            "full_name": "jane doe",
            "first_name": "jane",
            "last_name": "doe",
            "job_title": "director of operations",
            "job_company_name": "brightco marketing",
            "emails": [{"address": "jane@brightco.com", "type": "professional"}],
            "phone_numbers": [
                {"number": "+1 555-0199", "type": "work"},
                {"number": "+1 555-0100", "type": "mobile"},
            ],
            "linkedin_url": "linkedin.com/in/janedoe",
        },
    }


@pytest.fixture
def sample_leads_payload():
    """Leads as the browser posts them to /api/leads."""
    return [
        {
            "businessName": "BrightCo Marketing",
            "industry": "Digital Marketing Agency",
            "rationale": "Growing marketing firm needs professional office space.",
            "contactName": "Jane Doe",
            "email": "jane@brightco.com",
            "website": "https://brightco.com",
            "linkedinUrl": "https://linkedin.com/company/brightco-marketing",
        },
        {
            "businessName": "Fresh Market Co",
            "industry": "Organic Grocery",
            "rationale": 'Needs a "storefront" with loading dock access.',
            "contactName": "Maria Garcia",
            "email": "maria.garcia@freshmarket.co",
        },
    ]
