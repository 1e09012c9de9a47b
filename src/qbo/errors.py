"""Exceptions raised by the QBO client.

Every error the package raises derives from `QBOError` so callers can catch
one type. None of them are retried internally; the first failure aborts the
call and any partially accumulated results are dropped.
"""

from __future__ import annotations


class QBOError(RuntimeError):
    """Base exception for QBO client errors."""


class TransportError(QBOError):
    """HTTP-layer failure: network error, non-2xx status or a non-JSON body."""

    def __init__(self, message: str, status_code: int = 0, response_body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body

    @property
    def is_auth_error(self) -> bool:
        # Expired access tokens come back as 401, sometimes only as an
        # `invalid_token` fault in the body.
        return self.status_code == 401 or "invalid_token" in self.response_body.lower()


class NotFoundError(QBOError):
    """A count reported zero records, or a query returned an empty collection."""


class DecodeError(QBOError):
    """A JSON payload did not match the shape expected for an entity type."""

    def __init__(self, message: str, entity_type: str | None = None) -> None:
        super().__init__(message)
        self.entity_type = entity_type


class ProtocolError(QBOError):
    """A response broke a structural rule of the API (e.g. a CDC element with two types)."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key
