"""Unit tests for keyset cursors."""

import base64
from datetime import UTC, datetime

from src.tf_common.pagination import cursor_decode, cursor_encode


def test_cursor_roundtrip_keeps_timestamp_and_id() -> None:
    ts = datetime(2026, 3, 1, 12, 30, 15, 123456, tzinfo=UTC)
    cursor = cursor_encode(ts, "0b7e1c2a-0000-0000-0000-000000000001")
    decoded_ts, decoded_id = cursor_decode(cursor)
    assert decoded_ts == ts
    assert decoded_id == "0b7e1c2a-0000-0000-0000-000000000001"


def test_missing_cursor() -> None:
    assert cursor_decode(None) == (None, None)


def test_garbled_cursor_is_treated_as_first_page() -> None:
    assert cursor_decode("%%%not-base64%%%") == (None, None)
    assert cursor_decode(base64.b64encode(b'{"ts": "yesterday", "id": "x"}').decode()) == (
        None,
        None,
    )
