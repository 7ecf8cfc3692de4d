"""Process-wide MongoDB connection with majority-durable defaults."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import (
    ConnectionFailure,
    DuplicateKeyError,
    ExecutionTimeout,
    PyMongoError,
    WriteConcernError,
)
from pymongo.read_concern import ReadConcern
from pymongo.write_concern import WriteConcern

from movie_catalog.errors import DuplicateKeyViolation, WriteError

COMMENTS_COLLECTION = "comments"
USERS_COLLECTION = "users"
SESSIONS_COLLECTION = "sessions"
DEFAULT_WRITE_TIMEOUT_MS = 2500

_logger = logging.getLogger(__name__)


@dataclass
class DurableConnection:
    """Shared MongoDB client handing out majority-durable collection handles.

    Build it once at process start and pass the same instance to every
    repository. Writes through any handle wait for a journaled majority
    acknowledgement, bounded by ``write_timeout_ms``.
    """

    client: MongoClient
    database_name: str
    write_timeout_ms: int = DEFAULT_WRITE_TIMEOUT_MS

    @classmethod
    def create(
        cls,
        uri: str,
        database_name: str,
        write_timeout_ms: int = DEFAULT_WRITE_TIMEOUT_MS,
    ) -> "DurableConnection":
        """Create a connection from a MongoDB connection string."""
        client: MongoClient = MongoClient(
            uri,
            w="majority",
            journal=True,
            wTimeoutMS=write_timeout_ms,
            tz_aware=True,
        )
        return cls(
            client=client,
            database_name=database_name,
            write_timeout_ms=write_timeout_ms,
        )

    @property
    def write_concern(self) -> WriteConcern:
        """Majority, journaled write concern with a bounded wait."""
        return WriteConcern(w="majority", j=True, wtimeout=self.write_timeout_ms)

    @property
    def database(self) -> Database:
        return self.client.get_database(
            self.database_name, write_concern=self.write_concern
        )

    def comments(self) -> Collection:
        """Return the comments collection."""
        return self._collection(COMMENTS_COLLECTION)

    def users(self) -> Collection:
        """Return the users collection."""
        return self._collection(USERS_COLLECTION)

    def sessions(self) -> Collection:
        """Return the sessions collection."""
        return self._collection(SESSIONS_COLLECTION)

    def critics(self) -> Collection:
        """Return the comments collection for majority-consistent aggregation."""
        return self.database.get_collection(
            COMMENTS_COLLECTION,
            write_concern=self.write_concern,
            read_concern=ReadConcern("majority"),
        )

    def ensure_indexes(self) -> None:
        """Create the indexes the uniqueness guarantees rely on."""
        with translate_errors("ensure indexes"):
            self.users().create_index([("email", ASCENDING)], unique=True)
            self.sessions().create_index([("user_id", ASCENDING)], unique=True)
            self.comments().create_index([("email", ASCENDING)])
        _logger.info("Indexes ensured on database %s", self.database_name)

    def close(self) -> None:
        """Close the underlying client."""
        self.client.close()

    def _collection(self, name: str) -> Collection:
        return self.database.get_collection(name, write_concern=self.write_concern)


@contextmanager
def translate_errors(action: str) -> Iterator[None]:
    """Re-raise driver errors from ``action`` as catalog errors."""
    try:
        yield
    except DuplicateKeyError as exc:
        key = (exc.details or {}).get("keyValue")
        raise DuplicateKeyViolation(
            f"Failed to {action}: duplicate key {key}", key=key
        ) from exc
    except (WriteConcernError, ConnectionFailure, ExecutionTimeout) as exc:
        _logger.warning("Failed to %s within the durability bound: %s", action, exc)
        raise WriteError(
            f"Failed to {action}: store did not confirm in time", retryable=True
        ) from exc
    except PyMongoError as exc:
        raise WriteError(f"Failed to {action}: {exc}") from exc
