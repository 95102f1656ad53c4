"""
Pydantic schemas for lead generation, persistence and enrichment.

Wire format is camelCase (the browser client's convention); Python code uses
snake_case attributes. Both spellings are accepted on input.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LeadForm(CamelModel):
    """Property requirements submitted from the lead form."""
    business_type: str = Field(..., min_length=1, description="Type of tenant business wanted")
    target_location: str = Field(..., min_length=1, description="City or area of the property")
    square_footage: str = Field(..., min_length=1, description="Available space in square feet")
    features: list[str] = Field(default_factory=list, description="Wanted property features, e.g. Parking, Loading Dock")


class LeadCreate(CamelModel):
    business_name: str = Field(..., min_length=1)
    industry: str = Field(..., min_length=1)
    rationale: str = Field(..., min_length=1)
    contact_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    website: Optional[str] = None
    linkedin_url: Optional[str] = None


class LeadResponse(LeadCreate):
    id: int
    phone: Optional[str] = None
    enriched_name: Optional[str] = None
    title: Optional[str] = None
    is_enriched: bool = False
    created_at: Optional[datetime] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class EnrichmentResult(CamelModel):
    """
    Outcome of one person lookup.

    Failures are values too (success=False with an error message) so they
    can be cached like successes.
    """
    success: bool
    phone: Optional[str] = None
    full_name: Optional[str] = None
    title: Optional[str] = None
    linkedin_url: Optional[str] = None
    error: Optional[str] = None


class GeneratedLead(LeadCreate):
    """A generated (not yet persisted) candidate tenant."""
    id: str


class GeneratedLeads(CamelModel):
    source: str = Field(..., description="'places' for live search, 'mock' for catalogue data")
    leads: list[GeneratedLead]
