import logging

from portal.db.base import Base
from portal.db.session import engine

logger = logging.getLogger(__name__)


def init_db() -> None:
    logger.info("creating tables on %s", engine.url.render_as_string(hide_password=True))
    Base.metadata.create_all(bind=engine)
