"""FastAPI integration: lifespan hook and document-store dependency.

The live ``CouchDBService`` lives on ``app.state`` for the lifetime of the
application. Route handlers depend on ``get_document_store`` and tests swap
in a ``StubCouchDBService`` through ``app.dependency_overrides``.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from .config import get_settings, parse_database_list
from .service import CouchDBService, DocumentStore


@asynccontextmanager
async def couchdb_lifespan(app: FastAPI):
    """Application lifecycle hook.

    Startup:
    - builds the CouchDB facade from settings
    - ensures every database in ``COUCHDB_DATABASES`` exists
    Shutdown:
    - closes the facade's HTTP client
    """

    settings = get_settings()
    service = CouchDBService.from_settings(settings)
    app.state.couchdb = service
    try:
        for database_name in parse_database_list(settings.couchdb_databases):
            await service.create_database(database_name)
        yield
    finally:
        await service.close()


def get_document_store(request: Request) -> DocumentStore:
    """Return the facade created by ``couchdb_lifespan``."""

    return request.app.state.couchdb
