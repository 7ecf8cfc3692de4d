"""Domain models for login sessions."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Session:
    """The single active login session of a user."""

    user_id: str
    jwt: str
