"""Typed async CouchDB facade for FastAPI applications."""

from .codec import COUCH_DATE_FORMAT, CouchDateTime, CouchDocument, DocumentCodec
from .config import Settings, get_settings
from .dependencies import couchdb_lifespan, get_document_store
from .errors import (
    ConflictError,
    CreationFailedError,
    DecodeFailedError,
    InvalidPayloadError,
    NotFoundError,
    StoreError,
    TransportError,
)
from .service import CouchDBService, DocumentStore
from .testing import StubCouchDBService

__all__ = [
    "COUCH_DATE_FORMAT",
    "ConflictError",
    "CouchDBService",
    "CouchDateTime",
    "CouchDocument",
    "CreationFailedError",
    "DecodeFailedError",
    "DocumentCodec",
    "DocumentStore",
    "InvalidPayloadError",
    "NotFoundError",
    "Settings",
    "StoreError",
    "StubCouchDBService",
    "TransportError",
    "couchdb_lifespan",
    "get_document_store",
    "get_settings",
]
