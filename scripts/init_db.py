import logging
import time

from services.feedback_service.app.config.settings import get_settings
from services.feedback_service.app.exceptions import StoreError
from services.feedback_service.app.models.database import (
    Base,
    build_engine,
    build_session_factory,
)
from services.feedback_service.app.services.store import FeedbackStore

logger = logging.getLogger("init_db")


def wait_for_db(store: FeedbackStore, retries: int = 5, delay: float = 5):
    """Block until the database answers, for containers that start before it."""
    while True:
        try:
            store.ping()
            logger.info("Database connection successful")
            return
        except StoreError:
            retries -= 1
            if retries <= 0:
                raise
            logger.warning("Database not ready, retrying...")
            time.sleep(delay)


def init_db():
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    engine = build_engine(settings)
    try:
        wait_for_db(FeedbackStore(build_session_factory(engine)))
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialized.")
    finally:
        engine.dispose()


if __name__ == "__main__":
    init_db()
