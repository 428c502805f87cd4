"""
Dashboard analytics and CSV export over listed feedback entries.
"""

from __future__ import annotations

import csv
import io
from collections import Counter
from typing import Any, Iterable

from feedback_server.feedback import CATEGORIES, parse_timestamp

CSV_HEADERS = [
    "Date",
    "Name",
    "Email",
    "Company",
    "Categories",
    "Suggestion",
    "Rating",
    "Contact Me",
    "Subscribe",
]
TIMELINE_DAYS = 7


def _rating(entry: dict) -> int:
    value = entry.get("rating")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


def _categories(entry: dict) -> list[str]:
    value = entry.get("categories")
    if not isinstance(value, list):
        return []
    return [str(c) for c in value]


def summarize(entries: Iterable[dict]) -> dict[str, Any]:
    entries = list(entries)
    rated = [_rating(e) for e in entries if _rating(e) > 0]

    distribution = {str(r): 0 for r in range(1, 6)}
    for rating in rated:
        if 1 <= rating <= 5:
            distribution[str(rating)] += 1

    category_counts = {c: 0 for c in CATEGORIES}
    for entry in entries:
        for category in set(_categories(entry)):
            if category in category_counts:
                category_counts[category] += 1

    per_day: Counter[str] = Counter()
    for entry in entries:
        parsed = parse_timestamp(entry.get("timestamp"))
        if parsed is not None:
            per_day[parsed.date().isoformat()] += 1
    recent_days = sorted(per_day)[-TIMELINE_DAYS:]

    return {
        "total": len(entries),
        "average_rating": round(sum(rated) / len(rated), 1) if rated else None,
        "contact_requests": sum(1 for e in entries if e.get("contactMe") is True),
        "subscribers": sum(1 for e in entries if e.get("subscribe") is True),
        "rating_distribution": distribution,
        "category_counts": category_counts,
        "timeline": [{"date": day, "count": per_day[day]} for day in recent_days],
    }


def _csv_row(entry: dict) -> list[str]:
    parsed = parse_timestamp(entry.get("timestamp"))
    rating = _rating(entry)
    return [
        parsed.date().isoformat() if parsed else "",
        entry.get("name") or "Anonymous",
        entry.get("email") or "N/A",
        entry.get("company") or "N/A",
        "; ".join(_categories(entry)),
        str(entry.get("suggestion") or ""),
        str(rating) if rating else "N/A",
        "Yes" if entry.get("contactMe") else "No",
        "Yes" if entry.get("subscribe") else "No",
    ]


def to_csv(entries: Iterable[dict]) -> str:
    out = io.StringIO()
    w = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
    w.writerow(CSV_HEADERS)
    for entry in entries:
        w.writerow(_csv_row(entry))
    return out.getvalue()
