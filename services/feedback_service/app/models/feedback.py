from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    String,
    Text,
)
from .database import Base

MESSAGE_MAX_LENGTH = 2000


def _utcnow():
    return datetime.now(timezone.utc)


class Feedback(Base):
    """SQLAlchemy ORM model for feedback records"""

    __tablename__ = 'feedbacks'
    __table_args__ = (
        CheckConstraint('rating >= 1 AND rating <= 5', name='ck_feedbacks_rating_range'),
        CheckConstraint(
            f'length(message) <= {MESSAGE_MAX_LENGTH}', name='ck_feedbacks_message_length'
        ),
    )

    # Autoincrement id doubles as insertion order for created_at ties.
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=True)
    item = Column(Text, nullable=True)
    rating = Column(Integer, nullable=False)
    message = Column(String(MESSAGE_MAX_LENGTH), nullable=False)
    image_url = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    def __repr__(self):
        return f"<Feedback(id={self.id}, rating={self.rating})>"
