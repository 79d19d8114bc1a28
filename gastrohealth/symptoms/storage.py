# -*- coding: utf-8 -*-
"""Symptoms — DB storage helpers.

Entries are append-only: the API never edits or deletes a logged entry, and
lists are always returned in insertion order.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List
from uuid import uuid4

from ..app_db import db_conn
from ..config import settings


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _row_to_entry(row: Dict[str, Any]) -> Dict[str, Any]:
    try:
        entry = json.loads(row["payload_json"])
    except ValueError:
        entry = {}
    if not isinstance(entry, dict):
        entry = {}
    entry["id"] = row["id"]
    entry.setdefault("date", row["created_at"])
    entry.setdefault("symptom", "unknown")
    return entry


def list_symptoms(user_id: str) -> List[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            "SELECT id, payload_json, created_at FROM symptoms WHERE user_id = ? ORDER BY seq ASC",
            (user_id,),
        ).fetchall()
    return [_row_to_entry(dict(r)) for r in rows]


def append_symptom(user_id: str, entry: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Store one entry and return the user's full, updated list."""
    entry_id = str(uuid4())
    now = _utc_now()
    payload = dict(entry)
    payload["id"] = entry_id
    if not payload.get("date"):
        payload["date"] = now
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            "INSERT INTO symptoms (id, user_id, payload_json, created_at) VALUES (?, ?, ?, ?)",
            (entry_id, user_id, json.dumps(payload, ensure_ascii=False), now),
        )
    return list_symptoms(user_id)
