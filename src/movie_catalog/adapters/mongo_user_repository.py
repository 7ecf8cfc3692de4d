"""MongoDB-backed user repository."""

from dataclasses import dataclass

from movie_catalog.adapters.durable_connection import (
    DurableConnection,
    translate_errors,
)
from movie_catalog.domain.models import User, WriteOutcome
from movie_catalog.services.users import UserRepository


@dataclass
class MongoUserRepository(UserRepository):
    """MongoDB implementation for user persistence."""

    connection: DurableConnection

    def get_user(self, email: str) -> User | None:
        """Return the user registered under ``email``, if present."""
        with translate_errors("find user"):
            document = self.connection.users().find_one({"email": email})
        if document is None:
            return None
        return User(
            email=document["email"],
            name=document.get("name", ""),
            hashedpw=document.get("password", ""),
            preferences=dict(document.get("preferences") or {}),
        )

    def insert_user(self, user: User) -> None:
        """Insert a user document."""
        with translate_errors("insert user"):
            self.connection.users().insert_one(
                {
                    "name": user.name,
                    "email": user.email,
                    "password": user.hashedpw,
                    "preferences": dict(user.preferences),
                }
            )

    def delete_user(self, email: str) -> WriteOutcome:
        """Delete the user registered under ``email``."""
        with translate_errors("delete user"):
            result = self.connection.users().delete_one({"email": email})
        return WriteOutcome(
            acknowledged=result.acknowledged, deleted=result.deleted_count
        )

    def set_preferences(
        self, email: str, preferences: dict[str, object]
    ) -> WriteOutcome:
        """Overwrite the whole preferences field of a user."""
        with translate_errors("update user preferences"):
            result = self.connection.users().update_one(
                {"email": email}, {"$set": {"preferences": preferences}}
            )
        return WriteOutcome(
            acknowledged=result.acknowledged,
            matched=result.matched_count,
            modified=result.modified_count,
        )
