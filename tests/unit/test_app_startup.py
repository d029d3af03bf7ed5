import pytest
from fastapi.testclient import TestClient

from services.feedback_service.app.config.settings import Settings
from services.feedback_service.app.exceptions import StoreError
from services.feedback_service.app.main import create_app


def test_startup_fails_fast_when_database_unreachable(tmp_path, uploader):
    settings = Settings(
        _env_file=None, DATABASE_URL=f"sqlite:///{tmp_path}/missing-dir/feedback.db"
    )
    app = create_app(settings=settings, upload_client=uploader)

    with pytest.raises(StoreError):
        with TestClient(app):
            pass


def test_shutdown_releases_upload_client(settings, engine, uploader):
    app = create_app(settings=settings, engine=engine, upload_client=uploader)

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert app.state.store is not None

    assert uploader.closed is True


def test_settings_defaults():
    settings = Settings(_env_file=None)

    assert settings.PORT == 10000
    assert settings.UPLOAD_FOLDER == "ishow_feedback"
    assert "null" in settings.CORS_ALLOWED_ORIGINS
    assert settings.upload_configured is False
