"""Comment lifecycle and commenter statistics."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from movie_catalog.domain.comments import Comment, Critic
from movie_catalog.domain.models import WriteOutcome
from movie_catalog.errors import ValidationError, WriteError

TOP_COMMENTERS_LIMIT = 20

_logger = logging.getLogger(__name__)


class CommentRepository(Protocol):
    """Persistence interface for comments."""

    def get_comment(self, comment_id: str) -> Comment | None:
        """Return the comment with the given id, if present."""

    def insert_comment(self, comment: Comment) -> None:
        """Insert a comment under its pre-assigned id."""

    def update_comment_text(
        self, comment_id: str, email: str, text: str, date: datetime
    ) -> WriteOutcome:
        """Atomically set text and date on a comment owned by ``email``."""

    def delete_comment(self, comment_id: str, email: str) -> WriteOutcome:
        """Atomically delete a comment owned by ``email``."""

    def top_commenters(self, limit: int) -> list[Critic]:
        """Return the commenters with the most comments, highest count first."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class CommentStore:
    """Application service for comment persistence.

    Updates and deletes are conditioned on the owner email inside a single
    store operation, so a caller who does not own a comment gets ``False``
    back and nothing changes.
    """

    repository: CommentRepository
    clock: Callable[[], datetime] = _utc_now

    def get_comment(self, comment_id: str) -> Comment | None:
        """Return a comment by id, or None when it does not exist."""
        return self.repository.get_comment(comment_id)

    def add_comment(self, comment: Comment) -> Comment:
        """Insert a comment and return it as persisted."""
        if not comment.id:
            raise ValidationError("Comment must have an id before it is added")
        self.repository.insert_comment(comment)
        persisted = self.repository.get_comment(comment.id)
        if persisted is None:
            raise WriteError(f"Comment {comment.id} was not readable after insert")
        return persisted

    def update_comment(self, comment_id: str, text: str, email: str) -> bool:
        """Replace the text of a comment owned by ``email``."""
        outcome = self.repository.update_comment_text(
            comment_id, email, text, self.clock()
        )
        if outcome.matched > 0:
            if outcome.modified != 1:
                _logger.warning(
                    "Comment %s text was not updated. Is it the same text?",
                    comment_id,
                )
            return True
        _logger.warning(
            "Could not update comment %s. Make sure the comment is owned by %s",
            comment_id,
            email,
        )
        return False

    def delete_comment(self, comment_id: str, email: str) -> bool:
        """Delete a comment owned by ``email``."""
        outcome = self.repository.delete_comment(comment_id, email)
        if outcome.deleted != 1:
            _logger.warning(
                "Could not delete comment %s owned by %s", comment_id, email
            )
            return False
        return True

    def most_active_commenters(self) -> list[Critic]:
        """Return up to twenty commenters with the most comments."""
        return self.repository.top_commenters(TOP_COMMENTERS_LIMIT)
