"""
Feature flags toggling sections of the public feedback form.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from feedback_server.kv_store import KvStore

FEATURE_FLAGS_KEY = "feature_flags"

# Flags the public form knows about. A recognised flag that is absent from
# the stored mapping counts as enabled.
PRESET_FLAGS = (
    "showBasicInfo",
    "showCategories",
    "showRating",
    "showEngagementOptions",
    "showWhatWeWantSection",
)


def is_enabled(flags: dict[str, Any], name: str) -> bool:
    return flags.get(name) is not False


def effective_flags(flags: dict[str, Any]) -> dict[str, bool]:
    """Stored flags plus every preset flag resolved to its effective value."""
    resolved = {name: bool(value) for name, value in flags.items()}
    for name in PRESET_FLAGS:
        resolved[name] = is_enabled(flags, name)
    return resolved


@dataclass
class FeatureFlagStore:
    store: KvStore

    def get_flags(self) -> dict[str, Any]:
        return self.store.get(FEATURE_FLAGS_KEY) or {}

    def set_flags(self, flags: Optional[dict[str, Any]]) -> None:
        # Whole-mapping overwrite; flags not in ``flags`` are dropped. None
        # clears every flag.
        self.store.set(FEATURE_FLAGS_KEY, dict(flags or {}))
