import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..config.settings import Settings
from ..exceptions import AuthError, StoreError
from ..schemas.feedback import (
    AdminLogin,
    ErrorResponse,
    FeedbackListResponse,
    FeedbackResponse,
    OkResponse,
)
from ..services.store import FeedbackStore
from .dependencies import get_app_settings, get_store

logger = logging.getLogger(__name__)

# Largest id an INTEGER primary key can hold.
MAX_RECORD_ID = 2**63 - 1

router = APIRouter()


def check_admin_key(key, admin_password: Optional[str]) -> bool:
    if not admin_password or not isinstance(key, str):
        return False
    return hmac.compare_digest(key.encode("utf-8"), admin_password.encode("utf-8"))


@router.post(
    "/admin-login",
    response_model=OkResponse,
    responses={
        400: {"model": ErrorResponse, "description": "No key supplied"},
        401: {"model": ErrorResponse, "description": "Key does not match"},
    },
)
def admin_login(
    credentials: Optional[AdminLogin] = None,
    settings: Settings = Depends(get_app_settings),
):
    """
    Compare the supplied key with the configured admin password.

    This is a stateless check; no session or token is issued.
    """
    key = credentials.key if credentials is not None else None
    if not key:
        return JSONResponse(status_code=400, content={"error": "Missing key"})
    if not check_admin_key(key, settings.ADMIN_PASSWORD):
        raise AuthError()
    return OkResponse()


@router.delete(
    "/delete/{feedback_id}",
    response_model=OkResponse,
    responses={500: {"model": ErrorResponse, "description": "Delete failed"}},
)
def delete_feedback(feedback_id: str, store: FeedbackStore = Depends(get_store)):
    """
    Delete one feedback record. Unknown ids succeed, so deleting twice is safe.
    """
    try:
        record_id = int(feedback_id)
    except ValueError:
        logger.info(f"Delete requested for malformed id {feedback_id!r}; nothing to delete")
        return OkResponse()
    if not 0 < record_id <= MAX_RECORD_ID:
        logger.info(f"Delete requested for out-of-range id {record_id}; nothing to delete")
        return OkResponse()

    try:
        deleted = store.delete_by_id(record_id)
    except StoreError:
        logger.exception(f"DELETE /api/delete/{feedback_id} error")
        return JSONResponse(status_code=500, content={"error": "Delete failed"})

    if deleted:
        logger.info(f"Deleted feedback {record_id}")
    else:
        logger.info(f"Delete requested for unknown feedback {record_id}")
    return OkResponse()


@router.get("/feedbacks", response_model=FeedbackListResponse)
def list_feedbacks(limit: Optional[str] = None, store: FeedbackStore = Depends(get_store)):
    """
    Newest feedback first. ``limit`` defaults to 50 and is capped at 200.
    """
    rows = [FeedbackResponse.model_validate(row) for row in store.list(limit)]
    return FeedbackListResponse(count=len(rows), rows=rows)
