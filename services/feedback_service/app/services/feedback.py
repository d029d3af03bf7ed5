import logging
import math
from typing import Optional

from starlette.concurrency import run_in_threadpool

from ..exceptions import StoreError, UploadError, ValidationError
from ..models.feedback import MESSAGE_MAX_LENGTH, Feedback
from ..schemas.feedback import FeedbackCreate, FeedbackSubmission
from ..utils.upload_client import CloudinaryUploadClient
from .store import FeedbackStore

logger = logging.getLogger(__name__)

MESSAGE_MIN_LENGTH = 5


def parse_rating(raw) -> int:
    """Coerce a submitted rating to an int in [1, 5]."""
    if raw is None or isinstance(raw, bool):
        raise ValidationError("rating must be 1-5")
    if isinstance(raw, str):
        raw = raw.strip()
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValidationError("rating must be 1-5")
    if not math.isfinite(value) or not value.is_integer() or not 1 <= value <= 5:
        raise ValidationError("rating must be 1-5")
    return int(value)


def clean_message(raw) -> str:
    message = raw.strip() if isinstance(raw, str) else ""
    if len(message) < MESSAGE_MIN_LENGTH:
        raise ValidationError(f"message must be at least {MESSAGE_MIN_LENGTH} characters")
    if len(message) > MESSAGE_MAX_LENGTH:
        raise ValidationError(f"message must be at most {MESSAGE_MAX_LENGTH} characters")
    return message


def optional_text(raw) -> Optional[str]:
    if raw is None:
        return None
    value = str(raw).strip()
    return value or None


class FeedbackService:
    def __init__(self, store: FeedbackStore, uploader: CloudinaryUploadClient):
        self.store = store
        self.uploader = uploader

    async def submit(self, submission: FeedbackSubmission) -> Feedback:
        """
        Validates a submission, uploads its image if any, and stores it.

        Nothing is retried. If the upload fails no record is written. If the
        upload succeeds and the write fails, the uploaded image is left behind
        in object storage and its URL is logged.

        Args:
            submission: The decoded request fields.

        Returns:
            The persisted Feedback.

        Raises:
            ValidationError: rating or message broke the domain rules.
            UploadError: the image could not be uploaded.
            StoreError: the record could not be written.
        """
        rating = parse_rating(submission.rating)
        message = clean_message(submission.message)

        image_url = None
        if submission.image:
            try:
                result = await self.uploader.upload(
                    submission.image, filename=submission.image_filename
                )
            except UploadError:
                logger.exception("Image upload failed; feedback not saved")
                raise
            image_url = result.url

        feedback_data = FeedbackCreate(
            name=optional_text(submission.name),
            item=optional_text(submission.item),
            rating=rating,
            message=message,
            image_url=image_url,
        )
        try:
            feedback = await run_in_threadpool(self.store.create, feedback_data)
        except StoreError:
            if image_url:
                logger.error(f"Orphaned uploaded image after failed save: {image_url}")
            raise

        logger.info(f"Created feedback {feedback.id}")
        return feedback
