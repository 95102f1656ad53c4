import logging
from typing import List

from reva.models.domain.lead import EnrichmentResult, LeadCreate, LeadResponse
from reva.models.entities.lead import Lead
from reva.repositories.lead_repository import LeadRepository
from reva.services.pdl_client import PDLClient

logger = logging.getLogger(__name__)


def merge_enrichment(lead: LeadCreate, enrichment: EnrichmentResult | None) -> Lead:
    """Build the Lead row; enriched fields only come from a successful lookup."""
    entity = Lead(**lead.model_dump(), is_enriched=False)
    if enrichment is not None and enrichment.success:
        entity.phone = enrichment.phone
        entity.enriched_name = enrichment.full_name
        entity.title = enrichment.title
        entity.linkedin_url = enrichment.linkedin_url or lead.linkedin_url
        entity.is_enriched = True
    return entity


class LeadService:
    def __init__(self, repository: LeadRepository, enricher: PDLClient, top_count: int):
        self.repository = repository
        self.enricher = enricher
        self.top_count = top_count

    async def save_leads(self, leads: List[LeadCreate]) -> List[LeadResponse]:
        """
        Enrich the top leads, then persist every lead in submission order.
        """
        pairs = await self.enricher.enrich_top_leads(leads, self.top_count)
        enrichments = [result for _, result in pairs]
        enrichments += [None] * (len(leads) - len(enrichments))

        entities = [merge_enrichment(lead, result) for lead, result in zip(leads, enrichments)]
        saved = self.repository.create_many(entities)

        enriched_count = sum(1 for lead in saved if lead.is_enriched)
        logger.info(f"Successfully saved {len(saved)} leads to database ({enriched_count} enriched)")
        return [LeadResponse.model_validate(lead) for lead in saved]

    def get_leads(self) -> List[LeadResponse]:
        return [LeadResponse.model_validate(lead) for lead in self.repository.get_all()]

    def get_lead(self, lead_id: int) -> LeadResponse:
        return LeadResponse.model_validate(self.repository.get_or_raise(lead_id))

    def get_lead_entities(self) -> List[Lead]:
        return self.repository.get_all()
