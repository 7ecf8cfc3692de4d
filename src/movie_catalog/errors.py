"""Error taxonomy for catalog persistence failures.

Callers see three failure shapes: ``ValidationError`` for malformed input that
must never be retried, ``WriteError`` when the store could not confirm a write
(``retryable`` tells whether trying again may succeed), and its subtype
``DuplicateKeyViolation`` for unique index conflicts. Lookups that find nothing
return ``None`` and ownership mismatches return ``False``; neither is an error.
"""


class CatalogError(Exception):
    """Base exception for catalog persistence errors."""


class ValidationError(CatalogError):
    """Input was rejected before or by the store."""


class WriteError(CatalogError):
    """A write could not be confirmed by the store."""

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class DuplicateKeyViolation(WriteError):
    """A write collided with an existing unique key."""

    def __init__(self, message: str, key: dict[str, object] | None = None) -> None:
        super().__init__(message, retryable=False)
        self.key = key or {}
