"""Uniform error taxonomy raised by the document-store facade.

Every error is a ``fastapi.HTTPException`` so route handlers can let it
propagate and FastAPI renders it with the mapped status code.
"""

from __future__ import annotations

from fastapi import HTTPException

from .couchdb import CouchDBHTTPError, UnexpectedJSONFormatError


class StoreError(HTTPException):
    """Base class for facade failures, carrying a status code and a reason."""

    kind = "store"
    default_status_code = 500
    default_reason = "CouchDB operation failed"

    def __init__(self, reason: str | None = None, status_code: int | None = None) -> None:
        super().__init__(
            status_code=status_code or self.default_status_code,
            detail=reason or self.default_reason,
        )

    @property
    def reason(self) -> str:
        return str(self.detail)


class InvalidPayloadError(StoreError):
    """The document could not be serialized; no request was sent."""

    kind = "invalid_payload"
    default_status_code = 400
    default_reason = "Unable to serialize json dictionary"


class TransportError(StoreError):
    """HTTP failure reported by CouchDB with a status other than 404/409."""

    kind = "transport"
    default_status_code = 502


class NotFoundError(StoreError):
    kind = "not_found"
    default_status_code = 404
    default_reason = "Document not found"


class ConflictError(StoreError):
    """Stale revision token on update or delete."""

    kind = "conflict"
    default_status_code = 409
    default_reason = "Document update conflict"


class CreationFailedError(StoreError):
    """CouchDB answered without ``"ok": true``."""

    kind = "creation_failed"
    default_status_code = 400
    default_reason = "Unable to create object"


class DecodeFailedError(StoreError):
    """The stored document does not match the requested model."""

    kind = "decode_failed"
    default_status_code = 502
    default_reason = "Unable to decode document"


_STATUS_ERRORS: dict[int, type[StoreError]] = {
    404: NotFoundError,
    409: ConflictError,
}


def transform_error(error: BaseException) -> BaseException:
    """Map a ``CouchDBClient`` error to a ``StoreError``; pass others through."""

    if isinstance(error, CouchDBHTTPError):
        fallback = "Unknown CouchDB error"
    elif isinstance(error, UnexpectedJSONFormatError):
        fallback = "CouchDB unexpected JSON format"
    else:
        return error

    error_type = _STATUS_ERRORS.get(error.status_code, TransportError)
    return error_type(error.response or fallback, status_code=error.status_code)
