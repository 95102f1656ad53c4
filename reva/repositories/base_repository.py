from operator import eq
from typing import Any, Generic, List, Type, TypeVar
from sqlalchemy.orm import Session
import logging

from reva.models.base import Base

T = TypeVar('T', bound=Base)

logger = logging.getLogger(__name__)

class BaseRepository(Generic[T]):
    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: int) -> T | None:
        entity: Any | None = self.db.query(self.model).filter(eq(self.model.id, entity_id)).first()

        if not entity:
            logger.warning(f"{self.model.__name__} with id {entity_id} not found")

        return entity

    def get_all(self) -> List[T]:
        try:
            return self.db.query(self.model).order_by(self.model.id).all()
        except Exception as e:
            logger.error(f"Error retrieving {self.model.__name__} entities: {str(e)}")
            raise

    def save(self, entity: T) -> T:
        try:
            self.db.add(entity)
            self.db.commit()
            self.db.refresh(entity)

            logger.info(f"Saved {self.model.__name__} with id {entity.id}")
            return entity
        except Exception as e:
            logger.error(f"Error saving {self.model.__name__}: {str(e)}")
            self.db.rollback()
            raise
