from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from reva.models.base import Base

class Lead(Base):
    __tablename__ = 'leads'
    id = Column(Integer, primary_key=True, index=True)
    business_name = Column(String, nullable=False, index=True)
    industry = Column(String, nullable=False)
    rationale = Column(Text, nullable=False)
    contact_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    website = Column(String, nullable=True)
    linkedin_url = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    enriched_name = Column(String, nullable=True)
    title = Column(String, nullable=True)
    is_enriched = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
