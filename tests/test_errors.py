from __future__ import annotations

from fastapi import HTTPException
import httpx
import pytest

from fastapi_couchdb.couchdb import CouchDBHTTPError, UnexpectedJSONFormatError
from fastapi_couchdb.errors import (
    ConflictError,
    CreationFailedError,
    InvalidPayloadError,
    NotFoundError,
    StoreError,
    TransportError,
    transform_error,
)


@pytest.mark.parametrize(
    ("status_code", "error_type", "kind"),
    [
        (404, NotFoundError, "not_found"),
        (409, ConflictError, "conflict"),
        (400, TransportError, "transport"),
        (401, TransportError, "transport"),
        (500, TransportError, "transport"),
    ],
)
def test_http_errors_map_by_status(status_code, error_type, kind):
    error = transform_error(CouchDBHTTPError(status_code, "server said no"))

    assert type(error) is error_type
    assert error.kind == kind
    assert error.status_code == status_code
    assert error.reason == "server said no"


def test_http_error_without_reason_gets_default():
    error = transform_error(CouchDBHTTPError(500))

    assert error.reason == "Unknown CouchDB error"


def test_unexpected_json_maps_to_uniform_error():
    error = transform_error(UnexpectedJSONFormatError(200))

    assert isinstance(error, TransportError)
    assert error.status_code == 200
    assert error.reason == "CouchDB unexpected JSON format"


def test_unexpected_json_keeps_server_text():
    error = transform_error(UnexpectedJSONFormatError(201, "<html>"))

    assert error.reason == "<html>"


def test_other_errors_pass_through_unchanged():
    original = httpx.ConnectError("refused")

    assert transform_error(original) is original


def test_store_errors_are_http_exceptions_with_defaults():
    error = CreationFailedError()

    assert isinstance(error, StoreError)
    assert isinstance(error, HTTPException)
    assert error.status_code == 400
    assert error.detail == "Unable to create object"


def test_store_error_reason_and_status_can_be_overridden():
    error = InvalidPayloadError("bad field", status_code=422)

    assert error.status_code == 422
    assert error.reason == "bad field"
    assert error.kind == "invalid_payload"
