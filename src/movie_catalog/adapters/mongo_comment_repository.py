"""MongoDB-backed comment repository."""

from dataclasses import dataclass
from datetime import datetime

from bson import ObjectId

from movie_catalog.adapters.durable_connection import (
    DurableConnection,
    translate_errors,
)
from movie_catalog.domain.comments import Comment, Critic
from movie_catalog.domain.models import WriteOutcome
from movie_catalog.services.comments import CommentRepository


@dataclass
class MongoCommentRepository(CommentRepository):
    """MongoDB implementation for comment persistence."""

    connection: DurableConnection

    def get_comment(self, comment_id: str) -> Comment | None:
        """Return the comment with the given id, if present."""
        with translate_errors("find comment"):
            document = self.connection.comments().find_one(
                {"_id": to_document_id(comment_id)}
            )
        if document is None:
            return None
        return _parse_comment(document)

    def insert_comment(self, comment: Comment) -> None:
        """Insert a comment document under its pre-assigned id."""
        document: dict[str, object] = {
            "_id": to_document_id(comment.id or ""),
            "name": comment.name,
            "email": comment.email,
            "movie_id": (
                to_document_id(comment.movie_id) if comment.movie_id else None
            ),
            "text": comment.text,
            "date": comment.date,
        }
        with translate_errors("insert comment"):
            self.connection.comments().insert_one(document)

    def update_comment_text(
        self, comment_id: str, email: str, text: str, date: datetime
    ) -> WriteOutcome:
        """Set text and date on the comment only when owned by ``email``."""
        with translate_errors("update comment"):
            result = self.connection.comments().update_one(
                {"_id": to_document_id(comment_id), "email": email},
                {"$set": {"text": text, "date": date}},
            )
        return WriteOutcome(
            acknowledged=result.acknowledged,
            matched=result.matched_count,
            modified=result.modified_count,
        )

    def delete_comment(self, comment_id: str, email: str) -> WriteOutcome:
        """Delete the comment only when owned by ``email``."""
        with translate_errors("delete comment"):
            result = self.connection.comments().delete_one(
                {"_id": to_document_id(comment_id), "email": email}
            )
        return WriteOutcome(
            acknowledged=result.acknowledged, deleted=result.deleted_count
        )

    def top_commenters(self, limit: int) -> list[Critic]:
        """Return commenters ordered by comment count, highest first."""
        pipeline = [
            {"$sortByCount": "$email"},
            {"$sort": {"count": -1}},
            {"$limit": limit},
        ]
        with translate_errors("aggregate commenters"):
            rows = list(self.connection.critics().aggregate(pipeline))
        return [Critic(email=row["_id"], count=int(row["count"])) for row in rows]


def to_document_id(value: str) -> ObjectId | str:
    """Return the stored form of an opaque id string."""
    if ObjectId.is_valid(value) and str(ObjectId(value)) == value:
        return ObjectId(value)
    return value


def _parse_comment(document: dict[str, object]) -> Comment:
    movie_id = document.get("movie_id")
    date = document.get("date")
    return Comment(
        id=str(document["_id"]),
        movie_id=str(movie_id) if movie_id is not None else None,
        email=str(document.get("email", "")),
        text=str(document.get("text", "")),
        date=date if isinstance(date, datetime) else None,
        name=document.get("name"),  # type: ignore[arg-type]
    )
