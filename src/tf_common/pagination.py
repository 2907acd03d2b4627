"""Opaque cursor utilities for keyset pagination.

Rows are ordered by (created_at DESC, id DESC); the cursor carries the last
row's pair as Base64 JSON: {"ts": "<created_at ISO>", "id": "<uuid>"}.
Timestamps are decoded back to datetime since asyncpg binds TIMESTAMPTZ
parameters from datetime objects only.
"""

import base64
import json
from datetime import datetime


def cursor_encode(created_at: datetime, row_id: str) -> str:
    payload = {"ts": created_at.isoformat(), "id": row_id}
    return base64.b64encode(json.dumps(payload).encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[datetime | None, str | None]:
    """Decode cursor -> (created_at, id), or (None, None) on a missing/garbled cursor."""
    if cursor is None:
        return None, None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        return datetime.fromisoformat(data["ts"]), str(data["id"])
    except Exception:
        return None, None
