import logging

from academia.db.database import Database

logger = logging.getLogger(__name__)


def init_db(database: Database) -> None:
    database.create_all()
    logger.info("database schema ready")
