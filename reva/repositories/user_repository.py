from sqlalchemy.orm import Session
import logging

from reva.models.entities.user import User
from reva.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)

class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_username(self, username: str) -> User | None:
        return self.db.query(User).filter(User.username == username).first()
