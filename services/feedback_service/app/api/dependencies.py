from fastapi import Depends, Request

from ..config.settings import Settings
from ..services.feedback import FeedbackService
from ..services.store import FeedbackStore
from ..utils.upload_client import CloudinaryUploadClient


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> FeedbackStore:
    return request.app.state.store


def get_upload_client(request: Request) -> CloudinaryUploadClient:
    return request.app.state.upload_client


def get_feedback_service(
    store: FeedbackStore = Depends(get_store),
    uploader: CloudinaryUploadClient = Depends(get_upload_client),
):
    return FeedbackService(store, uploader)
