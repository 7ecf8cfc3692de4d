"""Shared test fixtures."""

from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import datetime

import pytest
from pymongo.errors import DuplicateKeyError

from movie_catalog.config import Settings
from movie_catalog.domain.comments import Comment, Critic
from movie_catalog.domain.models import User, WriteOutcome
from movie_catalog.domain.sessions import Session
from movie_catalog.errors import DuplicateKeyViolation
from movie_catalog.services.comments import CommentRepository, CommentStore
from movie_catalog.services.users import SessionRepository, UserRepository, UserStore

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0)


@dataclass
class InMemoryCommentRepository(CommentRepository):
    """In-memory comment repository for tests."""

    comments: dict[str, Comment] = field(default_factory=dict)

    def get_comment(self, comment_id: str) -> Comment | None:
        return self.comments.get(comment_id)

    def insert_comment(self, comment: Comment) -> None:
        assert comment.id is not None
        if comment.id in self.comments:
            raise DuplicateKeyViolation("duplicate", key={"_id": comment.id})
        self.comments[comment.id] = comment

    def update_comment_text(
        self, comment_id: str, email: str, text: str, date: datetime
    ) -> WriteOutcome:
        existing = self.comments.get(comment_id)
        if existing is None or existing.email != email:
            return WriteOutcome(acknowledged=True)
        updated = replace(existing, text=text, date=date)
        modified = 0 if updated == existing else 1
        self.comments[comment_id] = updated
        return WriteOutcome(acknowledged=True, matched=1, modified=modified)

    def delete_comment(self, comment_id: str, email: str) -> WriteOutcome:
        existing = self.comments.get(comment_id)
        if existing is None or existing.email != email:
            return WriteOutcome(acknowledged=True)
        del self.comments[comment_id]
        return WriteOutcome(acknowledged=True, deleted=1)

    def top_commenters(self, limit: int) -> list[Critic]:
        counts = Counter(comment.email for comment in self.comments.values())
        return [
            Critic(email=email, count=count)
            for email, count in counts.most_common(limit)
        ]


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    users: dict[str, User] = field(default_factory=dict)
    acknowledged: bool = True

    def get_user(self, email: str) -> User | None:
        return self.users.get(email)

    def insert_user(self, user: User) -> None:
        if user.email in self.users:
            raise DuplicateKeyViolation("duplicate", key={"email": user.email})
        self.users[user.email] = user

    def delete_user(self, email: str) -> WriteOutcome:
        removed = self.users.pop(email, None)
        return WriteOutcome(
            acknowledged=self.acknowledged, deleted=1 if removed else 0
        )

    def set_preferences(
        self, email: str, preferences: dict[str, object]
    ) -> WriteOutcome:
        existing = self.users.get(email)
        if existing is None:
            return WriteOutcome(acknowledged=True)
        modified = 0 if existing.preferences == preferences else 1
        self.users[email] = replace(existing, preferences=preferences)
        return WriteOutcome(acknowledged=True, matched=1, modified=modified)


@dataclass
class InMemorySessionRepository(SessionRepository):
    """In-memory session repository for tests."""

    sessions: dict[str, Session] = field(default_factory=dict)
    acknowledged: bool = True
    duplicate_failures: int = 0
    upsert_calls: int = 0

    def get_session(self, user_id: str) -> Session | None:
        return self.sessions.get(user_id)

    def upsert_session(self, user_id: str, jwt: str) -> WriteOutcome:
        self.upsert_calls += 1
        if self.duplicate_failures > 0:
            self.duplicate_failures -= 1
            raise DuplicateKeyViolation("duplicate", key={"user_id": user_id})
        existed = user_id in self.sessions
        self.sessions[user_id] = Session(user_id=user_id, jwt=jwt)
        return WriteOutcome(
            acknowledged=True,
            matched=1 if existed else 0,
            modified=1 if existed else 0,
            upserted_id=None if existed else user_id,
        )

    def delete_sessions(self, user_id: str) -> WriteOutcome:
        if not self.acknowledged:
            return WriteOutcome(acknowledged=False)
        removed = self.sessions.pop(user_id, None)
        return WriteOutcome(acknowledged=True, deleted=1 if removed else 0)


@dataclass
class FakeResult:
    """Write result carrying the counts pymongo reports."""

    acknowledged: bool = True
    matched_count: int = 0
    modified_count: int = 0
    deleted_count: int = 0
    upserted_id: object | None = None


@dataclass
class FakeCollection:
    """Fake pymongo collection recording calls and queued results."""

    name: str
    documents: list[dict[str, object]] = field(default_factory=list)
    results: list[FakeResult] = field(default_factory=list)
    aggregate_rows: list[dict[str, object]] = field(default_factory=list)
    calls: list[tuple[str, tuple, dict]] = field(default_factory=list)
    error: Exception | None = None

    def _record(self, action: str, *args, **kwargs) -> None:  # type: ignore[no-untyped-def]
        self.calls.append((action, args, kwargs))
        if self.error is not None:
            raise self.error

    def _next_result(self) -> FakeResult:
        return self.results.pop(0) if self.results else FakeResult()

    def find_one(self, query):  # type: ignore[no-untyped-def]
        self._record("find_one", query)
        for document in self.documents:
            if all(document.get(key) == value for key, value in query.items()):
                return document
        return None

    def insert_one(self, document):  # type: ignore[no-untyped-def]
        self._record("insert_one", document)
        if "_id" in document and any(
            existing.get("_id") == document["_id"] for existing in self.documents
        ):
            raise DuplicateKeyError(
                "E11000 duplicate key error",
                11000,
                {"keyValue": {"_id": document["_id"]}},
            )
        self.documents.append(document)
        return FakeResult()

    def create_index(self, keys, **kwargs):  # type: ignore[no-untyped-def]
        self._record("create_index", keys, **kwargs)
        return "_".join(f"{name}_{direction}" for name, direction in keys)

    def update_one(self, query, update, upsert=False):  # type: ignore[no-untyped-def]
        self._record("update_one", query, update, upsert=upsert)
        return self._next_result()

    def delete_one(self, query):  # type: ignore[no-untyped-def]
        self._record("delete_one", query)
        return self._next_result()

    def delete_many(self, query):  # type: ignore[no-untyped-def]
        self._record("delete_many", query)
        return self._next_result()

    def aggregate(self, pipeline):  # type: ignore[no-untyped-def]
        self._record("aggregate", pipeline)
        return iter(self.aggregate_rows)


@dataclass
class FakeConnection:
    """Fake durable connection handing out fake collections."""

    collections: dict[str, FakeCollection] = field(default_factory=dict)
    indexes_ensured: bool = False

    def _get(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name=name)
        return self.collections[name]

    def comments(self) -> FakeCollection:
        return self._get("comments")

    def critics(self) -> FakeCollection:
        return self._get("critics")

    def users(self) -> FakeCollection:
        return self._get("users")

    def sessions(self) -> FakeCollection:
        return self._get("sessions")

    def ensure_indexes(self) -> None:
        self.indexes_ensured = True


@pytest.fixture
def settings() -> Settings:
    return Settings(
        mongodb_uri="mongodb://localhost:27017",
        mongodb_database="test_mflix",
        mongodb_ensure_indexes=False,
    )


@pytest.fixture
def comment_repository() -> InMemoryCommentRepository:
    return InMemoryCommentRepository()


@pytest.fixture
def comment_store(comment_repository: InMemoryCommentRepository) -> CommentStore:
    return CommentStore(comment_repository, clock=lambda: FIXED_NOW)


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def session_repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def user_store(
    user_repository: InMemoryUserRepository,
    session_repository: InMemorySessionRepository,
) -> UserStore:
    return UserStore(
        user_repository=user_repository, session_repository=session_repository
    )
