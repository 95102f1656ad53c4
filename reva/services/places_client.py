"""
HTTP client for Google Places business search.

Turns lead-form requirements into real candidate tenants:
1. Text search "<business type> in <location>" restricted to a place type
2. Details lookup for the first N results
3. Each open business becomes a LeadCreate with a generated rationale,
   a placeholder contact (info@<domain>) that PDL enrichment may improve

Design decisions:
- httpx.AsyncClient with connection pooling
- Tenacity exponential backoff for timeouts and 429s
- Per-place failures are skipped, search failures raise PlacesAPIError
"""

import re
from typing import Any
from urllib.parse import urlparse

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from reva.config import Settings
from reva.core.exceptions import (
    ErrorCode,
    ExternalAPIError,
    PlacesAPIError,
    RateLimitError,
    RequestTimeoutError,
)
from reva.models.domain.lead import LeadCreate

logger = structlog.get_logger(__name__)

DETAIL_FIELDS = (
    "name,formatted_address,website,formatted_phone_number,"
    "international_phone_number,business_status,types,rating,user_ratings_total"
)

BUSINESS_TYPE_MAPPING: dict[str, list[str]] = {
    "restaurant": ["restaurant", "meal_takeaway", "food"],
    "retail": ["clothing_store", "store", "shopping_mall", "electronics_store"],
    "office": ["real_estate_agency", "accounting", "lawyer", "insurance_agency"],
    "medical": ["hospital", "doctor", "dentist", "pharmacy", "health"],
    "fitness": ["gym", "spa", "beauty_salon"],
    "automotive": ["car_dealer", "car_repair", "gas_station"],
    "entertainment": ["movie_theater", "amusement_park", "tourist_attraction"],
    "financial": ["bank", "atm", "finance"],
    "education": ["school", "university", "library"],
    "technology": ["electronics_store", "computer_store"],
}

INDUSTRY_BY_PLACE_TYPE: dict[str, str] = {
    "restaurant": "Restaurant and Food Service",
    "meal_takeaway": "Restaurant and Food Service",
    "food": "Restaurant and Food Service",
    "clothing_store": "Retail and Fashion",
    "store": "Retail Store",
    "shopping_mall": "Retail and Shopping",
    "electronics_store": "Electronics and Technology",
    "real_estate_agency": "Real Estate Services",
    "accounting": "Professional Services",
    "lawyer": "Legal Services",
    "insurance_agency": "Insurance Services",
    "hospital": "Healthcare Services",
    "doctor": "Medical Practice",
    "dentist": "Dental Services",
    "pharmacy": "Healthcare and Pharmacy",
    "gym": "Health and Wellness",
    "spa": "Health and Wellness",
    "beauty_salon": "Beauty and Wellness",
    "car_dealer": "Automotive Sales",
    "car_repair": "Automotive Services",
    "gas_station": "Automotive and Fuel",
    "movie_theater": "Entertainment",
    "bank": "Financial Services",
    "school": "Educational Services",
    "university": "Higher Education",
}

DEFAULT_INDUSTRY = "Professional Services"


def place_types_for(business_type: str) -> list[str]:
    """Exact mapping match first, then partial match, else 'establishment'."""
    lower_type = business_type.strip().lower()
    if lower_type in BUSINESS_TYPE_MAPPING:
        return BUSINESS_TYPE_MAPPING[lower_type]

    for key, types in BUSINESS_TYPE_MAPPING.items():
        if key in lower_type or lower_type in key:
            return types

    return ["establishment"]


def industry_from_types(types: list[str]) -> str:
    for place_type in types:
        if place_type in INDUSTRY_BY_PLACE_TYPE:
            return INDUSTRY_BY_PLACE_TYPE[place_type]
    return DEFAULT_INDUSTRY


def _size_category(square_footage: str) -> str:
    match = re.match(r"\s*(\d+)", square_footage.replace(",", ""))
    size = int(match.group(1)) if match and int(match.group(1)) > 0 else 1000
    if size < 1000:
        return "compact"
    if size < 5000:
        return "medium-sized"
    return "large"


def build_rationale(details: dict[str, Any], square_footage: str, features: list[str]) -> str:
    address = details.get("formatted_address") or ""
    rating = details.get("rating")

    base = f"{details['name']} is actively seeking {_size_category(square_footage)} commercial space"
    location_benefit = (
        "with street-level visibility and foot traffic"
        if "Street" in address or "Ave" in address
        else "in a professional setting"
    )
    rating_context = "This well-rated business" if rating and rating > 4.0 else "This growing business"
    features_context = (
        f" They specifically need {' and '.join(features[:2]).lower()}" if features else ""
    )
    return (
        f"{rating_context} {base} {location_benefit}.{features_context} "
        "Perfect match for commercial real estate opportunities."
    )


def _slug(name: str, replacement: str = "") -> str:
    return re.sub(r"[^a-z0-9]", replacement, name.lower())


def lead_from_details(details: dict[str, Any], square_footage: str, features: list[str]) -> LeadCreate:
    website = details.get("website")
    hostname = urlparse(website).hostname if website else None
    domain = hostname.replace("www.", "", 1) if hostname else f"{_slug(details['name'])}.com"

    return LeadCreate(
        business_name=details["name"],
        industry=industry_from_types(details.get("types") or []),
        rationale=build_rationale(details, square_footage, features),
        contact_name=f"{details['name']} Manager",
        email=f"info@{domain}",
        website=website or f"https://{domain}",
        linkedin_url=f"https://linkedin.com/company/{_slug(details['name'], '-')}",
    )


class PlacesClient:
    """
    Async client for the Google Places text search and details endpoints.

    Args:
        settings: Application settings (API key, base URL, limits)
        http_client: Optional preconfigured httpx.AsyncClient
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None):
        self.settings = settings
        self.api_key = settings.google_places_api_key
        self.client = http_client or httpx.AsyncClient(
            base_url=settings.google_places_base_url,
            timeout=settings.google_places_timeout
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def close(self) -> None:
        await self.client.aclose()

    async def _request(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        """
        GET a Places endpoint and return the JSON body.

        Raises:
            RateLimitError: 429 - retryable
            RequestTimeoutError: timeout - retryable
            ExternalAPIError: other HTTP, network or decoding failures
        """
        try:
            response = await self.client.get(endpoint, params={**params, "key": self.api_key})
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                raise RateLimitError("Google Places rate limit exceeded")
            raise ExternalAPIError(
                f"Google Places API error: {e.response.status_code}",
                status_code=e.response.status_code,
                details={"response": e.response.text[:500]}
            )

        except httpx.TimeoutException:
            raise RequestTimeoutError(
                f"Request to {endpoint} timed out after {self.settings.google_places_timeout}s",
                timeout=self.settings.google_places_timeout
            )

        except httpx.RequestError as e:
            raise ExternalAPIError(
                f"Request failed: {str(e)}",
                details={"error_type": type(e).__name__}
            )

        except ValueError as e:
            raise ExternalAPIError(
                "Google Places returned a malformed response",
                status_code=502,
                error_code=ErrorCode.INVALID_RESPONSE,
                details={"error": str(e)[:200]}
            )

    async def _request_with_retry(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        retrying = retry(
            retry=retry_if_exception_type((RequestTimeoutError, RateLimitError)),
            stop=stop_after_attempt(self.settings.google_places_max_retries + 1),
            wait=wait_exponential(multiplier=1, min=1, max=30),
            reraise=True
        )
        return await retrying(self._request)(endpoint, params)

    async def text_search(self, business_type: str, location: str) -> list[dict[str, Any]]:
        query = f"{business_type} in {location}"
        logger.info("places_search_started", query=query)

        data = await self._request_with_retry(
            "/textsearch/json",
            {"query": query, "type": place_types_for(business_type)[0]}
        )

        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            raise PlacesAPIError(f"Google Places API error: {status}", status=status)

        results = data.get("results") or []
        logger.info("places_search_completed", query=query, results=len(results))
        return results

    async def place_details(self, place_id: str) -> dict[str, Any] | None:
        """Details for one place, or None when the lookup fails."""
        try:
            data = await self._request_with_retry(
                "/details/json",
                {"place_id": place_id, "fields": DETAIL_FIELDS}
            )
        except ExternalAPIError as e:
            logger.warning("places_details_failed", place_id=place_id, error=e.message)
            return None

        if data.get("status") != "OK" or not isinstance(data.get("result"), dict):
            logger.warning("places_details_failed", place_id=place_id, status=data.get("status"))
            return None
        return data["result"]

    async def search_businesses(
        self,
        business_type: str,
        location: str,
        square_footage: str,
        features: list[str]
    ) -> list[LeadCreate]:
        """
        Search for real businesses and convert them into leads.

        Permanently closed businesses and places whose details cannot be
        fetched are skipped.

        Raises:
            PlacesAPIError: search returned an error status
            ExternalAPIError: search request failed
        """
        results = await self.text_search(business_type, location)

        leads: list[LeadCreate] = []
        for place in results[:self.settings.places_max_results]:
            details = await self.place_details(place["place_id"])
            if details is None or not details.get("name"):
                continue
            if details.get("business_status") == "CLOSED_PERMANENTLY":
                continue
            leads.append(lead_from_details(details, square_footage, features))

        logger.info("places_leads_generated", count=len(leads))
        return leads
