"""User registration, login sessions and preferences."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from movie_catalog.domain.models import User, WriteOutcome
from movie_catalog.domain.sessions import Session
from movie_catalog.errors import DuplicateKeyViolation, ValidationError, WriteError

_logger = logging.getLogger(__name__)


class UserRepository(Protocol):
    """Persistence interface for user accounts."""

    def get_user(self, email: str) -> User | None:
        """Return the user registered under ``email``, if present."""

    def insert_user(self, user: User) -> None:
        """Insert a user; raise DuplicateKeyViolation if the email is taken."""

    def delete_user(self, email: str) -> WriteOutcome:
        """Delete the user registered under ``email``."""

    def set_preferences(
        self, email: str, preferences: dict[str, object]
    ) -> WriteOutcome:
        """Overwrite the preferences of a user."""


class SessionRepository(Protocol):
    """Persistence interface for login sessions."""

    def get_session(self, user_id: str) -> Session | None:
        """Return the session of a user, if present."""

    def upsert_session(self, user_id: str, jwt: str) -> WriteOutcome:
        """Set the session token of a user, creating the session if needed."""

    def delete_sessions(self, user_id: str) -> WriteOutcome:
        """Delete every session of a user."""


class PreferencesOutcome(Enum):
    """Result of replacing a user's preferences."""

    UPDATED = "updated"
    UNCHANGED = "unchanged"
    USER_NOT_FOUND = "user_not_found"


@dataclass
class UserStore:
    """Application service for user accounts and their sessions.

    Sessions are keyed by the user id (the account email) and a user holds at
    most one of them: creating a session overwrites the previous token.
    """

    user_repository: UserRepository
    session_repository: SessionRepository

    def add_user(self, user: User) -> bool:
        """Register a new user, rejecting an email that is already taken."""
        if not user.email:
            raise ValidationError("User must have an email")
        try:
            self.user_repository.insert_user(user)
        except DuplicateKeyViolation as exc:
            raise ValidationError(
                f"User with email {user.email} already exists"
            ) from exc
        return True

    def get_user(self, email: str) -> User | None:
        """Return the user registered under ``email``, if present."""
        return self.user_repository.get_user(email)

    def create_user_session(self, user_id: str, jwt: str) -> bool:
        """Create or replace the login session of a user."""
        try:
            self.session_repository.upsert_session(user_id, jwt)
        except DuplicateKeyViolation:
            # A concurrent login inserted first; the retry matches its document.
            _logger.info("Concurrent session upsert for %s, retrying", user_id)
            try:
                self.session_repository.upsert_session(user_id, jwt)
            except DuplicateKeyViolation as exc:
                raise WriteError(
                    f"Could not store session for {user_id}", retryable=True
                ) from exc
        return True

    def get_user_session(self, user_id: str) -> Session | None:
        """Return the login session of a user, if present."""
        return self.session_repository.get_session(user_id)

    def delete_user_sessions(self, user_id: str) -> bool:
        """Delete the sessions of a user; True when the store acknowledged it."""
        outcome = self.session_repository.delete_sessions(user_id)
        if outcome.deleted < 1:
            _logger.warning(
                "User %s could not be found in sessions collection.", user_id
            )
        return outcome.acknowledged

    def delete_user(self, email: str) -> bool:
        """Delete a user after removing their sessions."""
        if not self.delete_user_sessions(email):
            _logger.error("Sessions of %s were not removed; user kept", email)
            return False
        outcome = self.user_repository.delete_user(email)
        if outcome.deleted < 1:
            _logger.warning(
                "User %s not found. Potential concurrent operation?", email
            )
        return outcome.acknowledged

    def replace_user_preferences(
        self, email: str, preferences: Mapping[str, object] | None
    ) -> PreferencesOutcome:
        """Replace a user's preferences wholesale and report what happened."""
        if preferences is None:
            raise ValidationError("Preferences cannot be set to None")
        outcome = self.user_repository.set_preferences(email, dict(preferences))
        if outcome.matched < 1:
            _logger.warning("User %s not found; preferences not stored", email)
            return PreferencesOutcome.USER_NOT_FOUND
        if outcome.modified < 1:
            _logger.warning(
                "User %s was not updated. Same preferences written: %s",
                email,
                preferences,
            )
            return PreferencesOutcome.UNCHANGED
        return PreferencesOutcome.UPDATED

    def update_user_preferences(
        self, email: str, preferences: Mapping[str, object] | None
    ) -> bool:
        """Replace a user's preferences; False when nothing was changed."""
        outcome = self.replace_user_preferences(email, preferences)
        return outcome is PreferencesOutcome.UPDATED
