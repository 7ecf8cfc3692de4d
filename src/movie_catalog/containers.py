"""Dependency container wiring for the catalog persistence layer."""

from dataclasses import dataclass

from movie_catalog.adapters.durable_connection import DurableConnection
from movie_catalog.adapters.mongo_comment_repository import MongoCommentRepository
from movie_catalog.adapters.mongo_session_repository import MongoSessionRepository
from movie_catalog.adapters.mongo_user_repository import MongoUserRepository
from movie_catalog.config import Settings
from movie_catalog.services.comments import CommentStore
from movie_catalog.services.users import UserStore


@dataclass
class AppContainer:
    """Holds process-wide persistence dependencies."""

    settings: Settings
    connection: DurableConnection
    comment_store: CommentStore
    user_store: UserStore


def build_container(
    settings: Settings | None = None,
    connection: DurableConnection | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    resolved_connection = connection or DurableConnection.create(
        resolved_settings.mongodb_uri,
        resolved_settings.mongodb_database,
        write_timeout_ms=resolved_settings.mongodb_write_timeout_ms,
    )
    if resolved_settings.mongodb_ensure_indexes:
        resolved_connection.ensure_indexes()
    comment_store = CommentStore(MongoCommentRepository(resolved_connection))
    user_store = UserStore(
        user_repository=MongoUserRepository(resolved_connection),
        session_repository=MongoSessionRepository(resolved_connection),
    )
    return AppContainer(
        settings=resolved_settings,
        connection=resolved_connection,
        comment_store=comment_store,
        user_store=user_store,
    )
