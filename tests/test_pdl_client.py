"""
Tests for the People Data Labs enrichment client and its cache contract.
"""

import httpx
import pytest

from reva.config import Settings
from reva.models.domain.lead import EnrichmentResult, LeadCreate
from reva.services.pdl_client import PDLClient, cache_key, parse_person, pick_linkedin, pick_phone

HOUR_MS = 3_600_000
HALF_HOUR_MS = 1_800_000


def make_client(settings, cache, handler) -> PDLClient:
    http_client = httpx.AsyncClient(
        base_url=settings.pdl_base_url,
        transport=httpx.MockTransport(handler)
    )
    return PDLClient(settings, cache, http_client=http_client)


class TestParsing:
    """Response parsing helpers."""

    def test_phone_prefers_mobile_then_work(self):
        data = {"phone_numbers": [
            {"number": "1", "type": "home"},
            {"number": "2", "type": "work"},
            {"number": "3", "type": "Mobile"},
        ]}
        assert pick_phone(data) == "3"

        data["phone_numbers"].pop()
        assert pick_phone(data) == "2"

    def test_phone_falls_back_to_first_and_accepts_strings(self):
        assert pick_phone({"phone_numbers": ["+15550100", "+15550101"]}) == "+15550100"
        assert pick_phone({"phone_numbers": []}) is None
        assert pick_phone({}) is None

    def test_linkedin_from_profiles(self):
        data = {"profiles": [
            {"network": "twitter", "url": "twitter.com/jd"},
            {"network": "LinkedIn", "url": "linkedin.com/in/jd"},
        ]}
        assert pick_linkedin(data) == "linkedin.com/in/jd"
        assert pick_linkedin({"linkedin_url": "linkedin.com/in/x", **data}) == "linkedin.com/in/x"
        assert pick_linkedin({}) is None

    def test_parse_person_no_match(self):
        result = parse_person({"status": 404, "error": {"message": "No records were found"}})
        assert result.success is False
        assert result.error == "No records were found"

    def test_cache_key_is_namespaced_and_normalized(self):
        assert cache_key(" Jane@BrightCo.com ") == "pdl:jane@brightco.com"


class TestEnrichPerson:
    """Cache-first enrichment with negative-result caching."""

    @pytest.mark.asyncio
    async def test_successful_lookup_is_parsed_and_cached(self, pdl_client, pdl_stub, cache, clock):
        result = await pdl_client.enrich_person("jane@brightco.com")

        assert result.success is True
        assert result.phone == "+1 555-0100"
        assert result.full_name == "jane doe"
        assert result.title == "director of operations"
        assert result.linkedin_url == "linkedin.com/in/janedoe"
        assert pdl_stub.calls == [{"email": "jane@brightco.com", "min_likelihood": 7}]

        # Served from cache until the success TTL elapses
        await pdl_client.enrich_person("jane@brightco.com")
        clock.advance(HOUR_MS)
        await pdl_client.enrich_person("jane@brightco.com")
        assert len(pdl_stub.calls) == 1

        clock.advance(1)
        await pdl_client.enrich_person("jane@brightco.com")
        assert len(pdl_stub.calls) == 2

    @pytest.mark.asyncio
    async def test_no_match_is_cached_with_shorter_ttl(self, pdl_client, pdl_stub, cache, clock):
        result = await pdl_client.enrich_person("ghost@nowhere.com")

        assert result.success is False
        assert "No records" in result.error
        assert cache.get("pdl:ghost@nowhere.com") == result

        await pdl_client.enrich_person("ghost@nowhere.com")
        assert len(pdl_stub.calls) == 1

        clock.advance(HALF_HOUR_MS + 1)
        await pdl_client.enrich_person("ghost@nowhere.com")
        assert len(pdl_stub.calls) == 2

    @pytest.mark.asyncio
    async def test_timeout_becomes_cached_failure(self, settings, cache):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(settings, cache, handler)
        result = await client.enrich_person("slow@example.com")

        assert result.success is False
        assert "timed out" in result.error
        assert cache.get("pdl:slow@example.com").success is False

        await client.enrich_person("slow@example.com")
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_server_error_becomes_failure(self, settings, cache):
        client = make_client(settings, cache, lambda request: httpx.Response(500, text="upstream down"))
        result = await client.enrich_person("a@example.com")

        assert result.success is False
        assert result.error.startswith("PDL API returned 500")

    @pytest.mark.asyncio
    async def test_rate_limit_and_auth_errors_become_failures(self, settings, cache):
        client = make_client(
            settings, cache,
            lambda request: httpx.Response(429, headers={"Retry-After": "30"}, json={})
        )
        assert (await client.enrich_person("a@example.com")).error == "PDL rate limit exceeded"

        client = make_client(settings, cache, lambda request: httpx.Response(401, json={}))
        assert "authentication failed" in (await client.enrich_person("b@example.com")).error

    @pytest.mark.asyncio
    async def test_malformed_body_becomes_failure(self, settings, cache):
        client = make_client(settings, cache, lambda request: httpx.Response(200, text="<html>"))
        result = await client.enrich_person("a@example.com")

        assert result.success is False
        assert result.error == "PDL returned a malformed response"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", [
        {"phone_numbers": [{"number": 555, "type": "mobile"}]},
        {"profiles": 7},
        {"full_name": {"first": "Jane"}},
    ])
    async def test_malformed_person_data_is_cached_failure(self, settings, cache, data):
        client = make_client(
            settings, cache, lambda request: httpx.Response(200, json={"status": 200, "data": data})
        )
        result = await client.enrich_person("odd@example.com")

        assert result == EnrichmentResult(success=False, error="PDL returned a malformed response")
        assert cache.get("pdl:odd@example.com") == result

    @pytest.mark.asyncio
    async def test_odd_profile_and_phone_entries_are_skipped(self, settings, cache):
        data = {
            "phone_numbers": [{"number": "555", "type": 5}],
            "profiles": ["linkedin.com/in/x", {"network": None}],
        }
        client = make_client(
            settings, cache, lambda request: httpx.Response(200, json={"status": 200, "data": data})
        )
        result = await client.enrich_person("odd@example.com")

        assert result.success is True
        assert result.phone == "555"
        assert result.linkedin_url is None
        assert cache.get("pdl:odd@example.com") == result

    @pytest.mark.asyncio
    async def test_missing_api_key_skips_network(self, cache):
        settings = Settings(pdl_api_key="")
        calls = []
        client = make_client(settings, cache, lambda request: calls.append(request))

        result = await client.enrich_person("a@example.com")

        assert result == EnrichmentResult(success=False, error="PDL API key not configured")
        assert calls == []

    @pytest.mark.asyncio
    async def test_enrich_top_leads_only_enriches_top_count(self, pdl_client, pdl_stub):
        leads = [
            LeadCreate(
                business_name=f"Business {index}",
                industry="Retail",
                rationale="Needs space",
                contact_name="Manager",
                email="jane@brightco.com" if index == 0 else f"info{index}@example.com",
            )
            for index in range(4)
        ]

        pairs = await pdl_client.enrich_top_leads(leads, top_count=3)

        assert [lead.business_name for lead, _ in pairs] == ["Business 0", "Business 1", "Business 2"]
        assert [result.success for _, result in pairs] == [True, False, False]
        assert len(pdl_stub.calls) == 3
