import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from services.feedback_service.app.config.settings import Settings
from services.feedback_service.app.main import create_app
from services.feedback_service.app.models.database import (
    Base,
    build_engine,
    build_session_factory,
)
from services.feedback_service.app.models.feedback import Feedback
from services.feedback_service.app.services.store import FeedbackStore
from services.feedback_service.app.utils.upload_client import UploadResult

ADMIN_PASSWORD = "s3cret-admin"


class FakeUploadClient:
    """Stands in for Cloudinary; records every upload it receives."""

    def __init__(self, url="https://res.cloudinary.com/demo/image/upload/v1/ishow_feedback/abc.png", error=None):
        self.url = url
        self.error = error
        self.calls = []
        self.closed = False

    async def upload(self, data, filename=None):
        self.calls.append((data, filename))
        if self.error is not None:
            raise self.error
        return UploadResult(url=self.url, public_id="ishow_feedback/abc")

    async def aclose(self):
        self.closed = True


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        ADMIN_PASSWORD=ADMIN_PASSWORD,
        CLOUDINARY_CLOUD_NAME="demo",
        CLOUDINARY_API_KEY="123456",
        CLOUDINARY_API_SECRET="abcdef",
        MAX_IMAGE_BYTES=1024,
    )


@pytest.fixture
def engine(settings):
    engine = build_engine(settings, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return FeedbackStore(build_session_factory(engine))


@pytest.fixture
def fetch_feedback(store):
    """Load one stored record by id, or None."""

    def fetch(feedback_id):
        with store.session_factory() as db:
            return db.get(Feedback, feedback_id)

    return fetch


@pytest.fixture
def uploader():
    return FakeUploadClient()


@pytest.fixture
def client(settings, engine, uploader):
    app = create_app(settings=settings, engine=engine, upload_client=uploader)
    with TestClient(app) as client:
        yield client
