# -*- coding: utf-8 -*-
"""API keys — DB storage helpers.

Each user stores one Google Gemini key, kept recoverable since it is forwarded
to Gemini on every proxy call.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from ..app_db import db_conn
from ..config import settings


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def save_api_key(*, user_id: str, api_key: str) -> None:
    now = _utc_now()
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO gemini_keys (user_id, api_key, created_at, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                api_key = excluded.api_key,
                updated_at = excluded.updated_at
            """,
            (user_id, api_key, now, now),
        )


def get_api_key(user_id: str) -> Optional[str]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT api_key FROM gemini_keys WHERE user_id = ?", (user_id,)).fetchone()
    return row["api_key"] if row else None


def has_api_key(user_id: str) -> bool:
    return get_api_key(user_id) is not None
