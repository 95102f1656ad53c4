from typing import List
from sqlalchemy.orm import Session
import logging

from reva.core.exceptions import LeadNotFoundError
from reva.models.entities.lead import Lead
from reva.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)

class LeadRepository(BaseRepository[Lead]):
    def __init__(self, db: Session):
        super().__init__(db, Lead)

    def get_or_raise(self, lead_id: int) -> Lead:
        lead = self.get_by_id(lead_id)
        if lead is None:
            raise LeadNotFoundError(lead_id)
        return lead

    def create_many(self, leads: List[Lead]) -> List[Lead]:
        """Insert all leads in one transaction."""
        try:
            self.db.add_all(leads)
            self.db.commit()
            for lead in leads:
                self.db.refresh(lead)
                logger.info(f"Saved lead to database with ID: {lead.id} - {lead.business_name}")
            return leads
        except Exception as e:
            logger.error(f"Error saving leads: {str(e)}")
            self.db.rollback()
            raise
