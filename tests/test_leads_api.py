"""
Tests for lead endpoints.

Endpoints: /api/leads/generate, /api/leads, /api/leads/export.csv,
/api/leads/copy, /api/leads/{lead_id}
"""

from unittest.mock import AsyncMock, patch

from reva.core.exceptions import PlacesAPIError


class TestGenerateLeads:
    """POST /api/leads/generate"""

    def test_generate_mock_leads(self, client):
        response = client.post(
            "/api/leads/generate",
            json={
                "businessType": "Coffee shop",
                "targetLocation": "Portland",
                "squareFootage": "1200",
                "features": ["Walk-In Traffic"],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "mock"
        assert 5 <= len(data["leads"]) <= 10
        first = data["leads"][0]
        assert {"id", "businessName", "industry", "rationale", "contactName", "email"} <= set(first)

    def test_generate_requires_form_fields(self, client):
        response = client.post("/api/leads/generate", json={"businessType": "Retail"})

        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_generate_places_error_is_structured(self, client):
        with patch("reva.services.places_client.PlacesClient.search_businesses", new_callable=AsyncMock) as mock_search, \
                patch("reva.services.places_client.PlacesClient.is_configured", new=True):
            mock_search.side_effect = PlacesAPIError("Google Places API error: REQUEST_DENIED", status="REQUEST_DENIED")

            response = client.post(
                "/api/leads/generate",
                json={"businessType": "Retail", "targetLocation": "Austin", "squareFootage": "900"},
            )

        assert response.status_code == 502
        data = response.json()
        assert data["error"] == "PLACES_001"
        assert data["retryable"] is False


class TestSaveLeads:
    """POST /api/leads and read-back endpoints."""

    def test_save_enriches_and_persists(self, client, sample_leads_payload, pdl_stub):
        response = client.post("/api/leads", json=sample_leads_payload)

        assert response.status_code == 200
        saved = response.json()
        assert len(saved) == 2

        enriched, plain = saved
        assert enriched["isEnriched"] is True
        assert enriched["phone"] == "+1 555-0100"
        assert enriched["enrichedName"] == "jane doe"
        assert enriched["title"] == "director of operations"
        assert enriched["linkedinUrl"] == "linkedin.com/in/janedoe"

        assert plain["isEnriched"] is False
        assert plain["phone"] is None
        assert plain["linkedinUrl"] is None
        assert len(pdl_stub.calls) == 2

        listed = client.get("/api/leads").json()
        assert [lead["businessName"] for lead in listed] == ["BrightCo Marketing", "Fresh Market Co"]

        single = client.get(f"/api/leads/{enriched['id']}")
        assert single.status_code == 200
        assert single.json()["email"] == "jane@brightco.com"

    def test_repeat_save_uses_cached_enrichment(self, client, sample_leads_payload, pdl_stub):
        client.post("/api/leads", json=sample_leads_payload)
        client.post("/api/leads", json=sample_leads_payload)

        # Both the success and the no-match outcome were cached
        assert len(pdl_stub.calls) == 2
        assert len(client.get("/api/leads").json()) == 4

    def test_invalid_payload_returns_400(self, client):
        response = client.post("/api/leads", json=[{"businessName": "Missing fields"}])
        assert response.status_code == 400
        assert response.json() == {"error": "LEAD_002", "message": "Invalid lead data"}

        response = client.post("/api/leads", content=b"not json", headers={"Content-Type": "application/json"})
        assert response.status_code == 400

    def test_unknown_lead_returns_404(self, client):
        response = client.get("/api/leads/999")
        assert response.status_code == 404
        assert response.json()["error"] == "LEAD_001"


class TestExport:
    """CSV export and plain-text copy."""

    def test_export_csv_quotes_every_cell(self, client, sample_leads_payload):
        client.post("/api/leads", json=sample_leads_payload)

        response = client.get("/api/leads/export.csv")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="reva-leads.csv"' in response.headers["content-disposition"]
        lines = response.text.split("\n")
        assert lines[0] == '"Business Name","Industry","Reasoning","Contact"'
        assert lines[2] == (
            '"Fresh Market Co","Organic Grocery",'
            '"Needs a ""storefront"" with loading dock access.","maria.garcia@freshmarket.co"'
        )

    def test_copy_lists_leads(self, client, sample_leads_payload):
        client.post("/api/leads", json=sample_leads_payload)

        text = client.get("/api/leads/copy").text

        assert text.startswith("REVA Generated Leads:\n\n1. BrightCo Marketing\n")
        assert "   Industry: Organic Grocery\n" in text
        assert "   Contact: maria.garcia@freshmarket.co\n" in text
        assert "   Phone: +1 555-0100\n" in text

    def test_export_with_no_leads_has_header_only(self, client):
        assert client.get("/api/leads/export.csv").text == '"Business Name","Industry","Reasoning","Contact"'
