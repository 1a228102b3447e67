from __future__ import annotations

"""Typed asynchronous CRUD facade over ``CouchDBClient``.

``CouchDBService`` is the live implementation of ``DocumentStore``; the
canned double in ``fastapi_couchdb.testing`` is the other one. Hosts pick
between them through FastAPI dependency injection.
"""

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from typing import Any, Protocol
import uuid

from .codec import DocumentCodec, DocumentT
from .config import Settings
from .couchdb import CouchDBClient, CouchDBError
from .errors import CreationFailedError, transform_error

logger = logging.getLogger(__name__)

DEFAULT_FIND_LIMIT = 10000


class DocumentStore(Protocol):
    """Asynchronous typed CRUD contract shared by the live facade and the double."""

    async def create_database(self, database_name: str) -> None: ...

    async def create(self, document: DocumentT, database_name: str) -> DocumentT: ...

    async def get(self, model: type[DocumentT], identifier: str, database_name: str) -> DocumentT: ...

    async def get_all(
        self,
        model: type[DocumentT],
        database_name: str,
        selector: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[DocumentT]: ...

    async def update(
        self,
        identifier: str,
        revision: str,
        document: DocumentT,
        database_name: str,
    ) -> DocumentT: ...

    async def delete(self, identifier: str, revision: str, database_name: str) -> None: ...


@contextmanager
def translate_errors() -> Iterator[None]:
    """Re-raise ``CouchDBClient`` errors as ``StoreError`` with the cause chained."""

    try:
        yield
    except CouchDBError as exc:
        raise transform_error(exc) from exc


def _acknowledged(document: DocumentT, response: dict[str, Any], reason: str) -> DocumentT:
    """Return a copy of ``document`` carrying the server-assigned id and rev."""

    if response.get("ok") is not True:
        raise CreationFailedError(reason)
    return document.model_copy(update={"id": response.get("id"), "rev": response.get("rev")})


def _require(value: str, name: str) -> str:
    if not value:
        raise ValueError(f"{name} is required")
    return value


class CouchDBService:
    """Typed CouchDB operations returning models and raising ``StoreError``.

    Each instance owns its own credentials and connection pool; there is no
    per-request state, so concurrent calls on one instance are safe.
    """

    def __init__(
        self,
        url: str,
        username: str = "",
        password: str = "",
        *,
        timeout: float = 30.0,
        find_limit: int = DEFAULT_FIND_LIMIT,
        client: CouchDBClient | None = None,
        codec: DocumentCodec | None = None,
    ) -> None:
        self.client = client or CouchDBClient(url, username, password, timeout=timeout)
        self.codec = codec or DocumentCodec()
        self.find_limit = find_limit

    @classmethod
    def from_settings(cls, settings: Settings) -> CouchDBService:
        """Build a service from environment-backed ``Settings``."""

        return cls(
            settings.couchdb_url,
            settings.couchdb_username,
            settings.couchdb_password,
            timeout=settings.couchdb_timeout_seconds,
            find_limit=settings.couchdb_find_limit,
        )

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""

        await self.client.close()

    async def __aenter__(self) -> CouchDBService:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def create_database(self, database_name: str) -> None:
        """Create a database; an existing database is left as is."""

        _require(database_name, "Database name")
        with translate_errors():
            created = await self.client.create_database(database_name)
        if created:
            logger.info("Created CouchDB database: %s", database_name)
        else:
            logger.debug("CouchDB database already exists: %s", database_name)

    async def create(self, document: DocumentT, database_name: str) -> DocumentT:
        """Store a new document under a freshly generated id."""

        body = self.codec.encode(document)
        identifier = str(uuid.uuid4())
        with translate_errors():
            response = await self.client.put_document(database_name, identifier, body)
        return _acknowledged(document, response, "Unable to create object")

    async def get(self, model: type[DocumentT], identifier: str, database_name: str) -> DocumentT:
        """Fetch one document and decode it as ``model``."""

        _require(identifier, "Document id")
        with translate_errors():
            payload = await self.client.get_document(database_name, identifier)
        return self.codec.decode(model, payload)

    async def get_all(
        self,
        model: type[DocumentT],
        database_name: str,
        selector: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[DocumentT]:
        """Run a Mango query; an empty selector matches every document.

        A response without a ``docs`` array, or with ``null`` there, is treated
        as no matches.
        """

        with translate_errors():
            response = await self.client.find_documents(
                database_name,
                selector or {},
                limit=limit if limit is not None else self.find_limit,
            )
        return self.codec.decode_many(model, response.get("docs") or [])

    async def update(
        self,
        identifier: str,
        revision: str,
        document: DocumentT,
        database_name: str,
    ) -> DocumentT:
        """Replace revision ``revision`` of a document; stale revisions conflict."""

        _require(identifier, "Document id")
        _require(revision, "Revision")
        body = self.codec.encode(document)
        with translate_errors():
            response = await self.client.put_document(database_name, identifier, body, rev=revision)
        return _acknowledged(document, response, "Unable to update object")

    async def delete(self, identifier: str, revision: str, database_name: str) -> None:
        """Delete revision ``revision`` of a document."""

        _require(identifier, "Document id")
        _require(revision, "Revision")
        with translate_errors():
            await self.client.delete_document(database_name, identifier, revision)
