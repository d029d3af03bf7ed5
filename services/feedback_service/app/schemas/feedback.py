from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional
from datetime import datetime


class FeedbackSubmission(BaseModel):
    """Raw submission as decoded from the request, before domain validation."""

    name: Optional[Any] = None
    item: Optional[Any] = None
    rating: Optional[Any] = None
    message: Optional[Any] = None
    image: Optional[bytes] = None
    image_filename: Optional[str] = None


class FeedbackCreate(BaseModel):
    name: Optional[str] = None
    item: Optional[str] = None
    rating: int = Field(..., ge=1, le=5)
    message: str = Field(..., min_length=5, max_length=2000)
    image_url: Optional[str] = None


class FeedbackResponse(BaseModel):
    id: int
    name: Optional[str] = None
    item: Optional[str] = None
    rating: int
    message: str
    image_url: Optional[str] = None
    created_at: datetime = Field(serialization_alias="createdAt")

    model_config = ConfigDict(from_attributes=True)


class FeedbackCreatedResponse(BaseModel):
    ok: bool = True
    feedbackId: int


class FeedbackListResponse(BaseModel):
    ok: bool = True
    count: int
    rows: List[FeedbackResponse]


class AdminLogin(BaseModel):
    key: Optional[Any] = None


class OkResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    error: str
