"""Canned ``DocumentStore`` for tests of code that depends on the facade."""

from __future__ import annotations

from typing import Any

from .codec import CouchDocument, DocumentT


class StubCouchDBService:
    """Offline ``DocumentStore`` answering every call from two injected values.

    When ``error`` is set every operation raises that exact object. Otherwise
    operations that return a document hand back ``result`` (``get_all`` wraps
    it in a one-element list) and ``create_database``/``delete`` succeed.
    Nothing about the calls is recorded.
    """

    def __init__(
        self,
        result: CouchDocument | None = None,
        error: BaseException | None = None,
    ) -> None:
        self.result = result
        self.error = error

    def _raise_error(self) -> None:
        if self.error is not None:
            raise self.error

    def _result_as(self, model: type[DocumentT]) -> DocumentT:
        self._raise_error()
        if self.result is None:
            raise RuntimeError("StubCouchDBService needs either `result` or `error` set")
        if not isinstance(self.result, model):
            raise TypeError(
                f"StubCouchDBService.result is {type(self.result).__name__}, expected {model.__name__}"
            )
        return self.result

    async def create_database(self, database_name: str) -> None:
        self._raise_error()

    async def create(self, document: DocumentT, database_name: str) -> DocumentT:
        return self._result_as(type(document))

    async def get(self, model: type[DocumentT], identifier: str, database_name: str) -> DocumentT:
        return self._result_as(model)

    async def get_all(
        self,
        model: type[DocumentT],
        database_name: str,
        selector: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[DocumentT]:
        return [self._result_as(model)]

    async def update(
        self,
        identifier: str,
        revision: str,
        document: DocumentT,
        database_name: str,
    ) -> DocumentT:
        return self._result_as(type(document))

    async def delete(self, identifier: str, revision: str, database_name: str) -> None:
        self._raise_error()
