# -*- coding: utf-8 -*-
"""Profile — DB storage helpers."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..app_db import db_conn
from ..config import settings

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def get_profile(user_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT payload_json FROM profiles WHERE user_id = ?", (user_id,)).fetchone()
    if not row:
        return None
    try:
        payload = json.loads(row["payload_json"])
    except ValueError:
        logger.warning("Discarding unreadable profile for user %s", user_id)
        return None
    return payload if isinstance(payload, dict) else None


def save_profile(user_id: str, profile: Dict[str, Any]) -> Dict[str, Any]:
    now = _utc_now()
    payload_json = json.dumps(profile, ensure_ascii=False)
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO profiles (user_id, payload_json, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                payload_json = excluded.payload_json,
                updated_at = excluded.updated_at
            """,
            (user_id, payload_json, now),
        )
    return profile
