from fastapi import APIRouter, Depends, Request, status
from starlette.datastructures import UploadFile

from ..config.settings import Settings
from ..exceptions import ValidationError
from ..schemas.feedback import ErrorResponse, FeedbackCreatedResponse, FeedbackSubmission
from ..services.feedback import FeedbackService
from .dependencies import get_app_settings, get_feedback_service

router = APIRouter()

SUBMISSION_FIELDS = ("name", "item", "rating", "message")


async def read_image(upload: UploadFile, max_bytes: int) -> bytes:
    data = await upload.read(max_bytes + 1)
    await upload.close()
    if len(data) > max_bytes:
        raise ValidationError("image too large")
    return data


async def read_submission(request: Request, max_image_bytes: int) -> FeedbackSubmission:
    """
    Decode a submission from either a multipart/urlencoded form or a JSON body.

    Only forms can carry an image (the ``image`` file part). An empty file part
    counts as no image.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            raise ValidationError("Invalid JSON body")
        if not isinstance(payload, dict):
            raise ValidationError("Invalid JSON body")
        return FeedbackSubmission(**{k: payload.get(k) for k in SUBMISSION_FIELDS})

    form = await request.form()
    fields = {k: form.get(k) for k in SUBMISSION_FIELDS}
    image = form.get("image")
    if isinstance(image, UploadFile):
        data = await read_image(image, max_image_bytes)
        if data:
            fields["image"] = data
            fields["image_filename"] = image.filename
    return FeedbackSubmission(**fields)


@router.post(
    "/feedback",
    response_model=FeedbackCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Rating or message failed validation"},
        500: {"model": ErrorResponse, "description": "Upload or database failure"},
    },
)
async def create_feedback(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    service: FeedbackService = Depends(get_feedback_service),
):
    """
    Submit feedback as multipart form data (name, item, rating, message, image)
    or as a JSON object without the image.
    """
    submission = await read_submission(request, settings.MAX_IMAGE_BYTES)
    feedback = await service.submit(submission)
    return FeedbackCreatedResponse(feedbackId=feedback.id)
