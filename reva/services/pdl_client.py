"""
HTTP client for People Data Labs person enrichment.

This module provides the async client used to add phone numbers, names,
job titles and LinkedIn profiles to generated leads, implementing:
- Cache-first lookups keyed "pdl:<email>"
- Negative-result caching (failures use a shorter TTL than successes)
- Conversion of every upstream failure into a cacheable result value
- Concurrent enrichment of the top N leads

Design decisions:
- httpx.AsyncClient for async operations and connection pooling
- No automatic retries: each PDL call is billed, a failure is cached instead
- enrich_person() never raises; errors are classified in _request() and
  turned into EnrichmentResult(success=False) at the boundary
"""

import asyncio
from typing import Any, Iterable

import httpx
import structlog

from reva.config import Settings
from reva.core.cache import TTLCache
from reva.core.exceptions import (
    AuthenticationError,
    ErrorCode,
    ExternalAPIError,
    RateLimitError,
    RequestTimeoutError,
)
from reva.models.domain.lead import EnrichmentResult, LeadCreate

logger = structlog.get_logger(__name__)

CACHE_NAMESPACE = "pdl"
ENRICH_ENDPOINT = "/v5/person/enrich"


def cache_key(email: str) -> str:
    return f"{CACHE_NAMESPACE}:{email.strip().lower()}"


def _phone_entries(data: dict[str, Any]) -> list[dict[str, Any]]:
    # PDL returns either plain strings or {"number", "type"} objects
    entries = []
    for item in data.get("phone_numbers") or []:
        if isinstance(item, str):
            entries.append({"number": item, "type": ""})
        elif isinstance(item, dict) and item.get("number"):
            entries.append(item)
    return entries


def pick_phone(data: dict[str, Any]) -> str | None:
    """Prefer a mobile number, then a work number, then the first listed."""
    phones = _phone_entries(data)
    if not phones:
        return None
    for wanted in ("mobile", "work"):
        for phone in phones:
            phone_type = phone.get("type")
            if isinstance(phone_type, str) and wanted in phone_type.lower():
                return phone["number"]
    return phones[0]["number"]


def pick_linkedin(data: dict[str, Any]) -> str | None:
    if data.get("linkedin_url"):
        return data["linkedin_url"]
    for profile in data.get("profiles") or []:
        if not isinstance(profile, dict):
            continue
        network = profile.get("network")
        if isinstance(network, str) and network.lower() == "linkedin":
            return profile.get("url")
    return None


def parse_person(payload: dict[str, Any]) -> EnrichmentResult:
    """
    Turn a PDL enrich response body into an EnrichmentResult.

    A body without status 200 and a data object is a "no match" failure.
    """
    data = payload.get("data")
    if payload.get("status") == 200 and isinstance(data, dict):
        return EnrichmentResult(
            success=True,
            phone=pick_phone(data),
            full_name=data.get("full_name"),
            title=data.get("job_title"),
            linkedin_url=pick_linkedin(data),
        )

    error = payload.get("error") or {}
    message = error.get("message") if isinstance(error, dict) else None
    return EnrichmentResult(success=False, error=message or "No match found")


class PDLClient:
    """
    Async client for the PDL person enrichment endpoint.

    Usage:
        client = PDLClient(settings, cache)
        try:
            result = await client.enrich_person("jane@example.com")
        finally:
            await client.close()

    Args:
        settings: Application settings (API key, URL, TTLs)
        cache: Shared TTL cache; outcomes are stored under "pdl:<email>"
        http_client: Optional preconfigured httpx.AsyncClient (tests pass
            one backed by httpx.MockTransport)
    """

    def __init__(
        self,
        settings: Settings,
        cache: TTLCache,
        http_client: httpx.AsyncClient | None = None
    ):
        self.settings = settings
        self.cache = cache
        self.success_ttl_ms = settings.cache_success_ttl_ms
        self.failure_ttl_ms = settings.cache_failure_ttl_ms
        self.client = http_client or httpx.AsyncClient(
            base_url=settings.pdl_base_url,
            headers={
                "X-Api-Key": settings.pdl_api_key or "",
                "Content-Type": "application/json",
            },
            timeout=settings.pdl_timeout
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def _request(self, email: str) -> dict[str, Any]:
        """
        POST the enrich request and return the parsed JSON body.

        Raises:
            AuthenticationError: Invalid API key (401/403)
            RateLimitError: Rate limit exceeded (429)
            RequestTimeoutError: Request timed out
            ExternalAPIError: Any other HTTP, network or decoding failure
        """
        try:
            response = await self.client.post(
                ENRICH_ENDPOINT,
                json={"email": email, "min_likelihood": self.settings.pdl_min_likelihood}
            )
            if response.status_code == 404:
                # PDL answers "no match" with a 404 carrying a normal error body
                return response.json()
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            if status_code in (401, 403):
                raise AuthenticationError(
                    "PDL authentication failed - check API key",
                    details={"response": e.response.text[:500]}
                )
            if status_code == 429:
                retry_after = e.response.headers.get("Retry-After")
                raise RateLimitError(
                    "PDL rate limit exceeded",
                    retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None
                )
            raise ExternalAPIError(
                f"PDL API returned {status_code}: {e.response.text[:500]}",
                status_code=status_code
            )

        except httpx.TimeoutException:
            raise RequestTimeoutError(
                f"PDL request timed out after {self.settings.pdl_timeout}s",
                timeout=self.settings.pdl_timeout
            )

        except httpx.RequestError as e:
            raise ExternalAPIError(
                f"Request failed: {str(e)}",
                error_code=ErrorCode.CONNECTION_ERROR,
                details={"error_type": type(e).__name__}
            )

        except ValueError as e:
            raise ExternalAPIError(
                "PDL returned a malformed response",
                error_code=ErrorCode.INVALID_RESPONSE,
                details={"error": str(e)}
            )

    async def _lookup(self, email: str) -> EnrichmentResult:
        if not self.settings.pdl_api_key:
            return EnrichmentResult(success=False, error="PDL API key not configured")

        try:
            payload = await self._request(email)
        except ExternalAPIError as e:
            logger.warning(
                "pdl_lookup_failed",
                email=email,
                error_code=e.error_code.value,
                message=e.message
            )
            return EnrichmentResult(success=False, error=e.message)

        if not isinstance(payload, dict):
            return EnrichmentResult(success=False, error="PDL returned a malformed response")
        try:
            return parse_person(payload)
        except (AttributeError, TypeError, KeyError, ValueError) as e:
            logger.warning("pdl_malformed_person", email=email, error=str(e)[:200])
            return EnrichmentResult(success=False, error="PDL returned a malformed response")

    async def enrich_person(self, email: str) -> EnrichmentResult:
        """
        Enrich one email address, consulting the cache first.

        Both outcomes are cached: successes for cache_success_ttl_ms,
        failures (no match, HTTP errors, timeouts) for cache_failure_ttl_ms.
        Concurrent misses on the same key each call PDL; the last write wins.

        Returns:
            EnrichmentResult - never raises
        """
        key = cache_key(email)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("pdl_cache_hit", key=key, success=cached.success)
            return cached

        result = await self._lookup(email)
        ttl_ms = self.success_ttl_ms if result.success else self.failure_ttl_ms
        self.cache.set(key, result, ttl_ms)

        logger.info("pdl_lookup_completed", email=email, success=result.success, ttl_ms=ttl_ms)
        return result

    async def enrich_top_leads(
        self,
        leads: Iterable[LeadCreate],
        top_count: int
    ) -> list[tuple[LeadCreate, EnrichmentResult]]:
        """
        Enrich the first top_count leads concurrently.

        Returns:
            (lead, result) pairs in the original order
        """
        selected = list(leads)[:top_count]
        logger.info("pdl_enrichment_started", count=len(selected))

        results = await asyncio.gather(*(self.enrich_person(lead.email) for lead in selected))

        pairs = list(zip(selected, results))
        logger.info(
            "pdl_enrichment_completed",
            count=len(pairs),
            successful=sum(1 for _, result in pairs if result.success)
        )
        return pairs
