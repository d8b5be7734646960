"""Unit tests for cursor encoding and decoding."""
from __future__ import annotations

import base64
import string
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from keyset_pager.core.pagination.cursor import CursorCodec, read_field
from keyset_pager.core.pagination.exceptions import CursorError


def _wrap(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


# ──────────────────────────────────────────────────────────────
# Round trip and determinism
# ──────────────────────────────────────────────────────────────


@pytest.mark.unit
class TestCursorCodecRoundTrip:
    """decode(encode(v)) == v for every supported scalar type."""

    @pytest.mark.parametrize(
        "values",
        [
            (42,),
            (0, -1, -128, 255, 2**70, -(2**70)),
            ("", "plain", "héllo wörld", "emoji 🎉"),
            (1.5, -0.25, 1e300, float("inf")),
            (True, False, None),
            (datetime(2025, 1, 15, 10, 30, 0),),
            (datetime(2025, 1, 15, 10, 30, 0, 123456, tzinfo=UTC),),
            (datetime(2025, 1, 15, 10, 30, tzinfo=timezone(timedelta(hours=5, minutes=30))),),
            (date(2024, 2, 29),),
            (Decimal("19.99"), Decimal("-0.0001")),
            (UUID("550e8400-e29b-41d4-a716-446655440000"),),
            (b"\x00\xff binary",),
            (datetime(2025, 11, 25, 12, 0), "mixed", 7, None, False),
        ],
    )
    def test_roundtrip(self, values):
        """Encoding then decoding returns the original tuple."""
        assert CursorCodec.decode(CursorCodec.encode(values)) == values

    def test_empty_tuple_roundtrip(self):
        """A cursor without values is still valid."""
        assert CursorCodec.decode(CursorCodec.encode([])) == ()

    def test_types_are_preserved(self):
        """bool stays bool, datetime stays datetime, Decimal keeps its exponent."""
        decoded = CursorCodec.decode(
            CursorCodec.encode([True, 1, datetime(2025, 1, 1), date(2025, 1, 1), Decimal("1.50")])
        )

        assert type(decoded[0]) is bool
        assert type(decoded[1]) is int
        assert type(decoded[2]) is datetime
        assert type(decoded[3]) is date
        assert str(decoded[4]) == "1.50"

    def test_timezone_awareness_is_preserved(self):
        """Aware datetimes decode aware, naive ones decode naive."""
        aware, naive = CursorCodec.decode(
            CursorCodec.encode([datetime(2025, 1, 1, tzinfo=UTC), datetime(2025, 1, 1)])
        )

        assert aware.tzinfo is not None
        assert aware.utcoffset() == timedelta(0)
        assert naive.tzinfo is None

    def test_encoding_is_deterministic(self):
        """The same tuple always yields the same string."""
        values = [datetime(2025, 1, 15, 10, 30), "abc", 99]

        assert CursorCodec.encode(values) == CursorCodec.encode(list(values))

    def test_encoding_is_url_safe(self):
        """Cursors only use unreserved URL characters and carry no padding."""
        cursor = CursorCodec.encode(["??>>", b"\xfb\xff\xfe", 2**64])
        allowed = set(string.ascii_letters + string.digits + "-_")

        assert set(cursor) <= allowed

    def test_different_tuples_encode_differently(self):
        """Type tags keep 1, True and "1" apart."""
        cursors = {CursorCodec.encode([v]) for v in (1, True, "1", 1.0)}

        assert len(cursors) == 4


# ──────────────────────────────────────────────────────────────
# Malformed input
# ──────────────────────────────────────────────────────────────


@pytest.mark.unit
class TestCursorCodecErrors:
    """Untrusted input always fails with CursorError."""

    @pytest.mark.parametrize(
        ("cursor", "reason"),
        [
            ("", "malformed"),
            ("not-valid-base64!!!", "malformed"),
            ("a", "malformed"),
            ("ünïcode", "malformed"),
            (_wrap(b"\x02"), "bad_version"),
            (_wrap(b"\x01s\x00\x00\x00\x05ab"), "truncated"),
            (_wrap(b"\x01s\x00\x00"), "truncated"),
            (_wrap(b"\x01f\x00\x00"), "truncated"),
            (_wrap(b"\x01u" + b"\x00" * 15), "truncated"),
            (_wrap(b"\x01Z"), "bad_tag"),
            (_wrap(b"\x01b\x02"), "bad_payload"),
            (_wrap(b"\x01s\x00\x00\x00\x01\xff"), "bad_payload"),
            (_wrap(b"\x01i\x00\x00\x00\x00"), "bad_payload"),
            (_wrap(b"\x01t\x00\x00\x00\x03bad"), "bad_payload"),
            (_wrap(b"\x01d\x00\x00\x00\x132025-01-01T00:00:00"), "bad_payload"),
            (_wrap(b"\x01D\x00\x00\x00\x03abc"), "bad_payload"),
        ],
    )
    def test_decode_rejects(self, cursor, reason):
        """Each kind of corruption maps to a specific reason."""
        with pytest.raises(CursorError) as exc_info:
            CursorCodec.decode(cursor)

        assert exc_info.value.reason == reason

    def test_decode_rejects_non_string(self):
        """Non-string cursors are rejected without a TypeError."""
        with pytest.raises(CursorError):
            CursorCodec.decode(12345)  # type: ignore[arg-type]

    def test_decode_rejects_truncated_valid_cursor(self):
        """Chopping characters off a real cursor is detected."""
        cursor = CursorCodec.encode(["a fairly long string value", 123456789])

        with pytest.raises(CursorError):
            CursorCodec.decode(cursor[:-6])

    def test_encode_rejects_unsupported_type(self):
        """Values without a type tag cannot be encoded."""
        with pytest.raises(CursorError) as exc_info:
            CursorCodec.encode([object()])

        assert exc_info.value.reason == "unsupported_type"

    def test_error_message_includes_reason(self):
        """str() of the error carries the reason detail."""
        with pytest.raises(CursorError) as exc_info:
            CursorCodec.decode(_wrap(b"\x01Z"))

        assert "reason='bad_tag'" in str(exc_info.value)


# ──────────────────────────────────────────────────────────────
# Record access
# ──────────────────────────────────────────────────────────────


@pytest.mark.unit
class TestCreateCursor:
    """Tests for building cursors from records."""

    def test_create_cursor_from_object(self):
        """Attributes are read in cursor field order."""

        @dataclass
        class Row:
            id: int
            created_at: datetime

        row = Row(id=7, created_at=datetime(2025, 1, 1))

        cursor = CursorCodec.create_cursor(row, ["created_at", "id"])

        assert CursorCodec.decode(cursor) == (datetime(2025, 1, 1), 7)

    def test_create_cursor_from_mapping(self):
        """Mappings are read by key, even for names shadowing dict methods."""
        record = {"items": 3, "id": 1}

        assert CursorCodec.decode(CursorCodec.create_cursor(record, ["items", "id"])) == (3, 1)

    def test_missing_field_reads_as_none(self):
        """Absent fields become None rather than raising."""
        assert read_field({"id": 1}, "missing") is None
        assert read_field(object(), "missing") is None
