import logging
from typing import List

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..exceptions import StoreError
from ..models.feedback import Feedback
from ..schemas.feedback import FeedbackCreate

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 200


def clamp_limit(limit) -> int:
    """
    Normalise a requested page size.

    Missing, zero, negative or non-numeric values fall back to the default;
    anything above the maximum is capped.
    """
    try:
        value = int(limit)
    except (TypeError, ValueError):
        return DEFAULT_LIST_LIMIT
    if value < 1:
        return DEFAULT_LIST_LIMIT
    return min(value, MAX_LIST_LIMIT)


class FeedbackStore:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def ping(self) -> None:
        """Run a trivial query; raises StoreError if the database is unreachable."""
        try:
            with self.session_factory() as db:
                db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise StoreError(f"Database unreachable: {e}") from e

    def create(self, feedback_data: FeedbackCreate) -> Feedback:
        """
        Persists a new feedback record.

        Args:
            feedback_data: Validated feedback fields.

        Returns:
            The stored Feedback with its generated id and created_at.
        """
        db_feedback = Feedback(**feedback_data.model_dump())
        with self.session_factory() as db:
            try:
                db.add(db_feedback)
                db.commit()
                db.refresh(db_feedback)
            except SQLAlchemyError as e:
                db.rollback()
                raise StoreError(f"Failed to create feedback: {e}") from e
        return db_feedback

    def list(self, limit=DEFAULT_LIST_LIMIT) -> List[Feedback]:
        """
        Retrieves feedback newest first.

        Records sharing a created_at are ordered by id, which the database
        assigns in insertion order.
        """
        stmt = (
            select(Feedback)
            .order_by(Feedback.created_at.desc(), Feedback.id.desc())
            .limit(clamp_limit(limit))
        )
        try:
            with self.session_factory() as db:
                return list(db.scalars(stmt).all())
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list feedback: {e}") from e

    def delete_by_id(self, feedback_id: int) -> bool:
        """
        Hard-deletes a feedback record.

        Returns:
            True if a record was removed, False if none had that id.
        """
        with self.session_factory() as db:
            try:
                num_deleted = db.query(Feedback).filter(Feedback.id == feedback_id).delete()
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                raise StoreError(f"Failed to delete feedback {feedback_id}: {e}") from e
        return num_deleted > 0
