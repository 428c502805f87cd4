"""
Feedback entries and the id index used to enumerate them.

Each entry is stored as ``feedback_<id>``; ``feedback_all_ids`` holds the
ordered list of ids. The entry write and the index update are two separate
store operations with no transaction around them, so reads tolerate ids
whose entry has gone missing.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from feedback_server.kv_store import KvStore

logger = logging.getLogger(__name__)

FEEDBACK_INDEX_KEY = "feedback_all_ids"
FEEDBACK_KEY_PREFIX = "feedback_"

CATEGORIES = ("services", "consultancy", "technology", "general")


def feedback_key(feedback_id: str) -> str:
    return f"{FEEDBACK_KEY_PREFIX}{feedback_id}"


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2024-05-01T10:00:00.000Z``."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _sort_key(entry: dict) -> tuple[int, float]:
    parsed = parse_timestamp(entry.get("timestamp"))
    if parsed is None:
        return (1, 0.0)
    return (0, -parsed.timestamp())


@dataclass
class FeedbackRepository:
    store: KvStore

    def _index(self) -> list[str]:
        return list(self.store.get(FEEDBACK_INDEX_KEY) or [])

    def submit(self, payload: dict) -> str:
        """
        Persist a submission and append it to the index.

        The payload is stored as given; only ``id`` and ``timestamp`` are
        assigned here and take precedence over same-named payload fields.
        """
        feedback_id = str(uuid.uuid4())
        entry = {**payload, "id": feedback_id, "timestamp": utc_timestamp()}
        self.store.set(feedback_key(feedback_id), entry)

        ids = self._index()
        ids.append(feedback_id)
        self.store.set(FEEDBACK_INDEX_KEY, ids)
        logger.info("Stored feedback %s", feedback_id)
        return feedback_id

    def list(self, category: str | None = None) -> list[dict]:
        """Return all resolvable entries, newest first."""
        entries = []
        for feedback_id in self._index():
            entry = self.store.get(feedback_key(feedback_id))
            if not isinstance(entry, dict):
                logger.debug("Index references missing feedback %s", feedback_id)
                continue
            if category and category not in (entry.get("categories") or []):
                continue
            entries.append(entry)
        entries.sort(key=_sort_key)
        return entries

    def delete(self, feedback_id: str) -> None:
        self.store.delete(feedback_key(feedback_id))
        ids = [fid for fid in self._index() if fid != feedback_id]
        self.store.set(FEEDBACK_INDEX_KEY, ids)
        logger.info("Deleted feedback %s", feedback_id)
