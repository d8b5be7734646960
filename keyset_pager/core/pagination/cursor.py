"""Cursor encoding and decoding for pagination.

A cursor is the ordered tuple of sort-field values of one boundary record,
serialised to an opaque, URL-safe string. Clients hand it back unchanged to
seek to the position right after (or before) that record.

Binary layout (before base64):

    version:u8  ( tag:u8  payload )*

Fixed-size payloads:
    N  None        no payload
    b  bool        1 byte (0 or 1)
    f  float       8 bytes, IEEE-754 big-endian
    u  UUID        16 bytes

Length-prefixed payloads (u32 big-endian length, then the bytes):
    i  int         two's complement, big-endian, minimal width
    s  str         UTF-8
    t  datetime    ISO 8601 text (offset kept when timezone-aware)
    d  date        ISO 8601 text
    D  Decimal     canonical ``str()`` text
    y  bytes       raw

The result is URL-safe base64 with the padding stripped, so it can travel in
query strings and headers without escaping.

Example:
    cursor = CursorCodec.encode([datetime(2025, 1, 15, tzinfo=UTC), 42])
    CursorCodec.decode(cursor)  # (datetime(2025, 1, 15, tzinfo=UTC), 42)
"""

from __future__ import annotations

import base64
import binascii
import struct
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from keyset_pager.core.pagination.exceptions import CursorError
from keyset_pager.infra.logging import get_lazy_logger

logger = get_lazy_logger(__name__)

CURSOR_VERSION = 1

_LENGTH = struct.Struct(">I")
_FLOAT = struct.Struct(">d")

TAG_NONE = b"N"
TAG_BOOL = b"b"
TAG_INT = b"i"
TAG_FLOAT = b"f"
TAG_STR = b"s"
TAG_DATETIME = b"t"
TAG_DATE = b"d"
TAG_DECIMAL = b"D"
TAG_UUID = b"u"
TAG_BYTES = b"y"


def read_field(record: Any, field: str) -> Any:
    """Read a named value from a record.

    Mappings are read by key; anything else (ORM instances, SQLAlchemy
    rows, dataclasses) by attribute. Missing fields read as None.
    """
    if isinstance(record, Mapping):
        return record.get(field)
    return getattr(record, field, None)


class _Reader:
    """Bounds-checked cursor over the decoded payload."""

    __slots__ = ("_data", "_pos")

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    @property
    def exhausted(self) -> bool:
        return self._pos >= len(self._data)

    def take(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise CursorError("truncated", "Cursor is truncated")
        chunk = self._data[self._pos : end]
        self._pos = end
        return chunk

    def take_sized(self) -> bytes:
        (size,) = _LENGTH.unpack(self.take(_LENGTH.size))
        return self.take(size)


class CursorCodec:
    """Encode and decode pagination cursors.

    Usage:
        cursor = CursorCodec.encode(["2025-01-15", 42])
        values = CursorCodec.decode(cursor)  # ("2025-01-15", 42)

        # From a row
        cursor = CursorCodec.create_cursor(user, ["created_at", "id"])
    """

    @staticmethod
    def encode(values: Sequence[Any]) -> str:
        """Encode an ordered tuple of scalar values to an opaque string.

        Args:
            values: Sort field values, in cursor field order

        Returns:
            URL-safe base64 string without padding

        Raises:
            CursorError: If a value has an unsupported type
        """
        parts = [bytes([CURSOR_VERSION])]
        for value in values:
            parts.append(CursorCodec._encode_value(value))
        raw = b"".join(parts)
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    @staticmethod
    def decode(cursor: str) -> tuple[Any, ...]:
        """Decode a cursor string back into its value tuple.

        Args:
            cursor: String produced by ``encode``

        Returns:
            Tuple of values, in cursor field order

        Raises:
            CursorError: If the cursor is malformed, truncated or
                contains an unknown type tag
        """
        raw = CursorCodec._unwrap(cursor)
        reader = _Reader(raw)

        (version,) = reader.take(1)
        if version != CURSOR_VERSION:
            logger.debug("Rejected cursor with version %s", version)
            raise CursorError("bad_version", f"Unsupported cursor version {version}")

        values: list[Any] = []
        while not reader.exhausted:
            values.append(CursorCodec._decode_value(reader))
        return tuple(values)

    @staticmethod
    def create_cursor(record: Any, fields: Sequence[str]) -> str:
        """Create a cursor from a record.

        Args:
            record: ORM instance, row or mapping
            fields: Cursor field names, in order

        Returns:
            Encoded cursor string
        """
        return CursorCodec.encode([read_field(record, field) for field in fields])

    @staticmethod
    def _unwrap(cursor: str) -> bytes:
        if not isinstance(cursor, str) or not cursor:
            raise CursorError("malformed", "Cursor must be a non-empty string")
        padded = cursor + "=" * (-len(cursor) % 4)
        try:
            raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
        except (UnicodeEncodeError, binascii.Error) as e:
            logger.debug("Rejected cursor that is not base64: %s", e)
            raise CursorError("malformed", "Cursor is not valid base64") from e
        if not raw:
            raise CursorError("truncated", "Cursor is empty")
        return raw

    @staticmethod
    def _encode_value(value: Any) -> bytes:
        # bool before int and datetime before date: both are subclasses
        if value is None:
            return TAG_NONE
        if isinstance(value, bool):
            return TAG_BOOL + (b"\x01" if value else b"\x00")
        if isinstance(value, int):
            width = value.bit_length() // 8 + 1
            return _sized(TAG_INT, value.to_bytes(width, "big", signed=True))
        if isinstance(value, float):
            return TAG_FLOAT + _FLOAT.pack(value)
        if isinstance(value, str):
            return _sized(TAG_STR, value.encode("utf-8"))
        if isinstance(value, datetime):
            return _sized(TAG_DATETIME, value.isoformat().encode("ascii"))
        if isinstance(value, date):
            return _sized(TAG_DATE, value.isoformat().encode("ascii"))
        if isinstance(value, Decimal):
            return _sized(TAG_DECIMAL, str(value).encode("ascii"))
        if isinstance(value, UUID):
            return TAG_UUID + value.bytes
        if isinstance(value, bytes | bytearray | memoryview):
            return _sized(TAG_BYTES, bytes(value))

        raise CursorError(
            "unsupported_type",
            f"Cannot encode value of type {type(value).__name__} in a cursor",
        )

    @staticmethod
    def _decode_value(reader: _Reader) -> Any:
        tag = reader.take(1)

        if tag == TAG_NONE:
            return None
        if tag == TAG_BOOL:
            flag = reader.take(1)
            if flag not in (b"\x00", b"\x01"):
                raise CursorError("bad_payload", "Invalid boolean in cursor")
            return flag == b"\x01"
        if tag == TAG_FLOAT:
            (number,) = _FLOAT.unpack(reader.take(_FLOAT.size))
            return number
        if tag == TAG_UUID:
            return UUID(bytes=reader.take(16))

        if tag not in _SIZED_DECODERS:
            logger.debug("Rejected cursor with unknown tag %r", tag)
            raise CursorError("bad_tag", f"Unknown cursor type tag {tag!r}")

        payload = reader.take_sized()
        try:
            return _SIZED_DECODERS[tag](payload)
        except (ValueError, InvalidOperation, UnicodeDecodeError) as e:
            raise CursorError("bad_payload", f"Invalid value in cursor: {e}") from e


def _sized(tag: bytes, payload: bytes) -> bytes:
    return tag + _LENGTH.pack(len(payload)) + payload


def _decode_int(payload: bytes) -> int:
    if not payload:
        raise ValueError("empty integer")
    return int.from_bytes(payload, "big", signed=True)


def _decode_datetime(payload: bytes) -> datetime:
    return datetime.fromisoformat(payload.decode("ascii"))


def _decode_date(payload: bytes) -> date:
    text = payload.decode("ascii")
    if "T" in text:
        raise ValueError("datetime where date expected")
    return date.fromisoformat(text)


def _decode_decimal(payload: bytes) -> Decimal:
    return Decimal(payload.decode("ascii"))


_SIZED_DECODERS = {
    TAG_INT: _decode_int,
    TAG_STR: lambda payload: payload.decode("utf-8"),
    TAG_DATETIME: _decode_datetime,
    TAG_DATE: _decode_date,
    TAG_DECIMAL: _decode_decimal,
    TAG_BYTES: bytes,
}


__all__ = ["CURSOR_VERSION", "CursorCodec", "read_field"]
