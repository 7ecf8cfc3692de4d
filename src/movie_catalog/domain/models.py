"""Domain models for catalog accounts."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class User:
    """Represents a registered user stored in the database."""

    email: str
    name: str
    hashedpw: str
    preferences: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class WriteOutcome:
    """Counts reported by the store for a single write."""

    acknowledged: bool
    matched: int = 0
    modified: int = 0
    deleted: int = 0
    upserted_id: object | None = None
