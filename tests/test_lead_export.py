"""
Tests for the CSV and plain-text lead formatters.
"""

from reva.models.entities.lead import Lead
from reva.services.lead_export import leads_to_csv, leads_to_text


def make_lead(**overrides) -> Lead:
    fields = {
        "business_name": "Blue Bottle Cafe",
        "industry": "Restaurant and Food Service",
        "rationale": "Needs 2,500 sq ft",
        "contact_name": "Blue Bottle Cafe Manager",
        "email": "info@bluebottle.com",
    }
    fields.update(overrides)
    return Lead(**fields)


def test_csv_quotes_every_cell_and_has_no_trailing_newline():
    csv_text = leads_to_csv([
        make_lead(),
        make_lead(business_name='Joe "The Baker"', rationale="Line one\nline two"),
    ])

    assert csv_text == (
        '"Business Name","Industry","Reasoning","Contact"\n'
        '"Blue Bottle Cafe","Restaurant and Food Service","Needs 2,500 sq ft","info@bluebottle.com"\n'
        '"Joe ""The Baker""","Restaurant and Food Service","Line one\nline two","info@bluebottle.com"'
    )


def test_csv_with_no_leads_is_header_only():
    assert leads_to_csv([]) == '"Business Name","Industry","Reasoning","Contact"'


def test_text_lists_phone_only_when_present():
    text = leads_to_text([make_lead(phone="+15550100"), make_lead(business_name="No Phone Co")])

    assert text.startswith("REVA Generated Leads:\n\n1. Blue Bottle Cafe\n")
    assert "   Phone: +15550100\n" in text
    assert text.count("Phone:") == 1
    assert "2. No Phone Co\n" in text
