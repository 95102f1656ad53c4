import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from reva.models.base import Base
from reva.models.entities import lead, user  # noqa: F401  (register tables)

logger = logging.getLogger(__name__)

def create_tables(engine: Engine):
    Base.metadata.create_all(bind=engine)

    inspector = inspect(engine)
    tables = inspector.get_table_names()
    logger.info(f"Tables in database: {tables}")
