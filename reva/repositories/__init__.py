from reva.repositories.lead_repository import LeadRepository
from reva.repositories.user_repository import UserRepository

__all__ = ["LeadRepository", "UserRepository"]
