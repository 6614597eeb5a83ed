import logging

from ats_portal.db.base import Base
from ats_portal.db.session import engine

logger = logging.getLogger(__name__)


def init_db(bind=None):
    """Create all tables. Importing the models package registers them on Base."""
    import ats_portal.db.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")
