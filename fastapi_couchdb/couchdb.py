from __future__ import annotations

"""Minimal async CouchDB HTTP client used underneath the typed facade."""

import logging
from typing import Any
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)


class CouchDBError(Exception):
    """Base class for structured errors raised by ``CouchDBClient``."""

    def __init__(self, status_code: int, response: str | None = None) -> None:
        """Keep the HTTP status and the server's explanation, if any."""

        super().__init__(f"CouchDB returned {status_code}: {response or 'no reason given'}")
        self.status_code = status_code
        self.response = response


class CouchDBHTTPError(CouchDBError):
    """The server answered with an HTTP error status."""


class UnexpectedJSONFormatError(CouchDBError):
    """The server answered successfully but the body is not a JSON object."""


def _segment(value: str) -> str:
    """Percent-encode one URL path segment (database name or document id)."""

    return quote(value, safe="")


def _payload(response: httpx.Response) -> dict[str, Any]:
    """Return the JSON object body or raise the matching ``CouchDBError``."""

    try:
        payload = response.json()
    except ValueError:
        payload = None

    if response.status_code >= 400:
        reason = None
        if isinstance(payload, dict):
            reason = payload.get("reason") or payload.get("error")
        raise CouchDBHTTPError(response.status_code, reason or response.text or None)

    if not isinstance(payload, dict):
        raise UnexpectedJSONFormatError(response.status_code, response.text or None)
    return payload


class CouchDBClient:
    """Thin async wrapper around the CouchDB HTTP API.

    Every method returns the raw JSON object CouchDB answered with. Typing
    and error translation are the facade's job.
    """

    def __init__(
        self,
        url: str,
        username: str = "",
        password: str = "",
        timeout: float = 30.0,
    ) -> None:
        """Initialize a persistent HTTP connection pool for one server."""

        self.url = url.rstrip("/")
        auth = (username, password) if username else None
        self._client = httpx.AsyncClient(base_url=self.url, auth=auth, timeout=timeout)

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""

        await self._client.aclose()

    async def create_database(self, name: str) -> bool:
        """Create a database; return ``False`` when it already exists."""

        response = await self._client.put(f"/{_segment(name)}")
        if response.status_code == 412:
            return False
        _payload(response)
        return True

    async def put_document(
        self,
        database: str,
        doc_id: str,
        body: dict[str, Any],
        rev: str | None = None,
    ) -> dict[str, Any]:
        """Create or replace a document under an explicit id."""

        params = {"rev": rev} if rev else None
        logger.debug("PUT %s/%s rev=%s", database, doc_id, rev)
        response = await self._client.put(
            f"/{_segment(database)}/{_segment(doc_id)}",
            json=body,
            params=params,
        )
        return _payload(response)

    async def get_document(self, database: str, doc_id: str) -> dict[str, Any]:
        """Fetch a single document by id."""

        logger.debug("GET %s/%s", database, doc_id)
        response = await self._client.get(f"/{_segment(database)}/{_segment(doc_id)}")
        return _payload(response)

    async def find_documents(
        self,
        database: str,
        selector: dict[str, Any],
        limit: int | None = None,
    ) -> dict[str, Any]:
        """Execute a Mango ``_find`` query and return the raw response."""

        query: dict[str, Any] = {"selector": selector}
        if limit is not None:
            query["limit"] = limit
        logger.debug("POST %s/_find selector=%s", database, selector)
        response = await self._client.post(f"/{_segment(database)}/_find", json=query)
        return _payload(response)

    async def delete_document(self, database: str, doc_id: str, rev: str) -> dict[str, Any]:
        """Delete one revision of a document."""

        logger.debug("DELETE %s/%s rev=%s", database, doc_id, rev)
        response = await self._client.delete(
            f"/{_segment(database)}/{_segment(doc_id)}",
            params={"rev": rev},
        )
        return _payload(response)
