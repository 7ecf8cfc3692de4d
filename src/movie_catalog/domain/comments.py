"""Domain models for movie comments."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Comment:
    """A viewer comment on a movie.

    ``id`` must be assigned before the comment is inserted; ``email`` names the
    owner and is the only credential allowed to change or remove the comment.
    """

    id: str | None
    movie_id: str | None
    email: str
    text: str
    date: datetime | None = None
    name: str | None = None


@dataclass(frozen=True)
class Critic:
    """A commenter and the number of comments they have written."""

    email: str
    count: int
