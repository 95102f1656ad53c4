"""
Lead generation from the lead form.

Uses Google Places when an API key is configured, otherwise draws 5-10
entries from a fixed catalogue of sample businesses.
"""

import random
import time

import structlog

from reva.models.domain.lead import GeneratedLead, GeneratedLeads, LeadCreate, LeadForm
from reva.services.places_client import PlacesClient

logger = structlog.get_logger(__name__)

# (name, industry, reasoning, contact email)
MOCK_BUSINESSES: tuple[tuple[str, str, str, str], ...] = (
    (
        "BrightCo Marketing",
        "Digital Marketing Agency",
        "Growing marketing firm needs professional office space with good visibility for client meetings and team collaboration.",
        "sarah.johnson@brightco.com",
    ),
    (
        "Artisan Coffee Roasters",
        "Coffee Shop & Roastery",
        "Established coffee roaster looking to expand retail presence with high foot traffic and storage for inventory.",
        "mike.wilson@artisancoffee.com",
    ),
    (
        "TechStart Solutions",
        "Software Development",
        "Fast-growing tech startup requiring modern office space with parking for remote team meetups and client presentations.",
        "alex.chen@techstart.io",
    ),
    (
        "Urban Fitness Studio",
        "Health & Wellness",
        "Boutique fitness brand seeking ground-floor space with parking and high visibility for walk-in customers.",
        "jenny.martinez@urbanfitness.com",
    ),
    (
        "Gourmet Provisions",
        "Specialty Food Store",
        "Premium food retailer needs accessible location with loading dock for deliveries and retail visibility.",
        "david.brown@gourmetprovisions.com",
    ),
    (
        "Creative Design Co",
        "Graphic Design Studio",
        "Design agency looking for inspiring workspace with natural light and space for creative team collaboration.",
        "lisa.thompson@creativedesign.co",
    ),
    (
        "Metro Legal Services",
        "Law Firm",
        "Growing legal practice needs professional office space with parking and private meeting areas for client consultations.",
        "robert.davis@metrolegal.com",
    ),
    (
        "Fresh Market Co",
        "Organic Grocery",
        "Organic food retailer seeking storefront with loading dock access and visibility for health-conscious customers.",
        "maria.garcia@freshmarket.co",
    ),
    (
        "Innovation Labs",
        "Research & Development",
        "R&D company requires flexible office space with room for equipment and collaborative work areas.",
        "james.kim@innovationlabs.com",
    ),
    (
        "Boutique Wellness",
        "Medical Spa",
        "Wellness center needs accessible location with parking and professional atmosphere for client treatments.",
        "patricia.white@boutiquewellness.com",
    ),
)

MIN_MOCK_RESULTS = 5
MAX_MOCK_RESULTS = 10


def contact_name_from_email(email: str) -> str:
    """'sarah.johnson@brightco.com' -> 'Sarah Johnson'"""
    local_part = email.split("@", 1)[0]
    return " ".join(part.capitalize() for part in local_part.replace("_", ".").split(".") if part)


def _with_ids(leads: list[LeadCreate]) -> list[GeneratedLead]:
    stamp = int(time.time() * 1000)
    return [
        GeneratedLead(id=f"lead-{stamp}-{index}", **lead.model_dump())
        for index, lead in enumerate(leads)
    ]


def generate_mock_leads(rng: random.Random | None = None) -> list[GeneratedLead]:
    rng = rng or random.Random()
    count = rng.randint(MIN_MOCK_RESULTS, MAX_MOCK_RESULTS)
    selected = rng.sample(MOCK_BUSINESSES, count)

    leads = [
        LeadCreate(
            business_name=name,
            industry=industry,
            rationale=reasoning,
            contact_name=contact_name_from_email(email),
            email=email,
            website=f"https://{email.split('@', 1)[1]}",
        )
        for name, industry, reasoning, email in selected
    ]
    return _with_ids(leads)


async def generate_leads(form: LeadForm, places: PlacesClient) -> GeneratedLeads:
    """
    Generate candidate tenants for the submitted form.

    Raises:
        ExternalAPIError: the live Places search failed
    """
    if not places.is_configured:
        leads = generate_mock_leads()
        logger.info("mock_leads_generated", count=len(leads), business_type=form.business_type)
        return GeneratedLeads(source="mock", leads=leads)

    found = await places.search_businesses(
        business_type=form.business_type,
        location=form.target_location,
        square_footage=form.square_footage,
        features=form.features
    )
    return GeneratedLeads(source="places", leads=_with_ids(found))
