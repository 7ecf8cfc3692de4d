"""MongoDB-backed login session repository."""

from dataclasses import dataclass

from movie_catalog.adapters.durable_connection import (
    DurableConnection,
    translate_errors,
)
from movie_catalog.domain.models import WriteOutcome
from movie_catalog.domain.sessions import Session
from movie_catalog.services.users import SessionRepository


@dataclass
class MongoSessionRepository(SessionRepository):
    """MongoDB implementation for login sessions."""

    connection: DurableConnection

    def get_session(self, user_id: str) -> Session | None:
        """Return the session of a user, if present."""
        with translate_errors("find session"):
            document = self.connection.sessions().find_one({"user_id": user_id})
        if document is None:
            return None
        return Session(user_id=document["user_id"], jwt=document.get("jwt", ""))

    def upsert_session(self, user_id: str, jwt: str) -> WriteOutcome:
        """Replace the token of a user's session, creating it when missing."""
        with translate_errors("upsert session"):
            result = self.connection.sessions().update_one(
                {"user_id": user_id}, {"$set": {"jwt": jwt}}, upsert=True
            )
        return WriteOutcome(
            acknowledged=result.acknowledged,
            matched=result.matched_count,
            modified=result.modified_count,
            upserted_id=result.upserted_id,
        )

    def delete_sessions(self, user_id: str) -> WriteOutcome:
        """Delete every session stored for a user."""
        with translate_errors("delete sessions"):
            result = self.connection.sessions().delete_many({"user_id": user_id})
        return WriteOutcome(
            acknowledged=result.acknowledged, deleted=result.deleted_count
        )
