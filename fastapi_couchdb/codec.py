"""Serialization boundary between typed documents and CouchDB payloads.

Untyped ``dict`` payloads stay inside this module and ``couchdb``:
- ``CouchDocument`` is the base model for anything stored in CouchDB
- ``CouchDateTime`` pins dates to ``yyyy-MM-dd'T'HH:mm:ss.SSSZZZZZ``
- ``DocumentCodec`` turns models into request bodies and responses into models
"""

from __future__ import annotations

from datetime import datetime, timezone
import re
from types import NoneType, UnionType
from typing import Annotated, Any, TypeVar, Union, get_args, get_origin

from pydantic import (
    BaseModel,
    BeforeValidator,
    Field,
    PlainSerializer,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic_core import PydanticSerializationError, to_jsonable_python

from .errors import DecodeFailedError, InvalidPayloadError

COUCH_DATE_FORMAT = "yyyy-MM-dd'T'HH:mm:ss.SSSZZZZZ"

_DATE_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}(Z|[+-]\d{2}:\d{2})$"
)

_WIRE_EXCLUDE = {"id", "rev"}


def format_couch_date(value: datetime) -> str:
    """Render a datetime with millisecond precision and a fixed UTC offset.

    Naive values are taken to be UTC. A zero offset is written ``Z``.
    """

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    stamp = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        f".{value.microsecond // 1000:03d}"
    )
    offset_minutes = int(value.utcoffset().total_seconds()) // 60
    if offset_minutes == 0:
        return f"{stamp}Z"
    sign = "+" if offset_minutes > 0 else "-"
    hours, minutes = divmod(abs(offset_minutes), 60)
    return f"{stamp}{sign}{hours:02d}:{minutes:02d}"


def parse_couch_date(value: Any) -> Any:
    """Parse the fixed wire format; datetimes built in Python pass through.

    Naive values are pinned to UTC, the offset they are written with.
    """

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if not isinstance(value, str) or not _DATE_PATTERN.match(value):
        raise ValueError(f"date must use the {COUCH_DATE_FORMAT} format")

    if value.endswith("Z"):
        value = f"{value[:-1]}+00:00"
    return datetime.fromisoformat(value)


CouchDateTime = Annotated[
    datetime,
    BeforeValidator(parse_couch_date),
    PlainSerializer(format_couch_date, return_type=str),
]


def _is_datetime_annotation(annotation: Any) -> bool:
    """True for ``datetime``, ``CouchDateTime`` and their ``| None`` forms."""

    if get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    if annotation is datetime:
        return True
    if get_origin(annotation) not in (Union, UnionType):
        return False
    members = [arg for arg in get_args(annotation) if arg is not NoneType]
    return bool(members) and all(_is_datetime_annotation(arg) for arg in members)


class CouchDocument(BaseModel):
    """Base model for documents stored through the facade.

    ``id`` and ``rev`` are ``None`` until the document is first created and
    are read from ``_id``/``_rev`` when a stored document is decoded. Every
    top-level ``datetime`` field only accepts the fixed wire format, whether
    or not it is declared as ``CouchDateTime``.
    """

    id: str | None = Field(default=None, alias="_id")
    rev: str | None = Field(default=None, alias="_rev")

    model_config = {"populate_by_name": True}

    @field_validator("*", mode="before")
    @classmethod
    def enforce_couch_dates(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or info.field_name is None:
            return value
        field = cls.model_fields.get(info.field_name)
        if field is not None and _is_datetime_annotation(field.annotation):
            return parse_couch_date(value)
        return value


DocumentT = TypeVar("DocumentT", bound=CouchDocument)


def _to_wire(value: Any) -> Any:
    """Format every datetime, at any depth, in the fixed wire format."""

    if isinstance(value, datetime):
        return format_couch_date(value)
    if isinstance(value, dict):
        return {key: _to_wire(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_wire(item) for item in value]
    return value


class DocumentCodec:
    """Encode documents to request bodies and decode stored JSON to models."""

    def encode(self, document: BaseModel) -> dict[str, Any]:
        """Serialize a document to a JSON object without ``_id``/``_rev``.

        Identity travels in the URL and the ``rev`` query parameter, so the
        body never carries it.
        """

        if not isinstance(document, BaseModel):
            raise InvalidPayloadError(f"Unable to serialize {type(document).__name__} as a document")

        exclude = _WIRE_EXCLUDE & set(type(document).model_fields)
        try:
            dumped = document.model_dump(mode="python", by_alias=True, exclude=exclude)
            body = to_jsonable_python(_to_wire(dumped))
        except PydanticSerializationError as exc:
            raise InvalidPayloadError(str(exc)) from exc

        if not isinstance(body, dict):
            raise InvalidPayloadError()
        return body

    def decode(self, model: type[DocumentT], payload: Any) -> DocumentT:
        """Validate one stored document against ``model``."""

        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise DecodeFailedError(
                f"Unable to decode {model.__name__}: {exc.error_count()} validation error(s)"
            ) from exc

    def decode_many(self, model: type[DocumentT], payloads: Any) -> list[DocumentT]:
        """Decode each element of a ``docs`` array independently."""

        if not isinstance(payloads, list):
            raise DecodeFailedError(f"Expected a list of {model.__name__} documents")
        return [self.decode(model, payload) for payload in payloads]
