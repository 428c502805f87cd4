import unittest
from datetime import datetime, timezone

from feedback_server.features import FeatureFlagStore, effective_flags, is_enabled
from feedback_server.feedback import (
    FEEDBACK_INDEX_KEY,
    FeedbackRepository,
    feedback_key,
    parse_timestamp,
    utc_timestamp,
)
from feedback_server.kv_store import InMemoryKvStore
from feedback_server import reports


class FeedbackRepositoryTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryKvStore()
        self.repo = FeedbackRepository(self.store)

    def test_submit_assigns_id_and_timestamp(self):
        feedback_id = self.repo.submit(
            {"suggestion": "x", "id": "client-id", "timestamp": "yesterday"}
        )
        entry = self.store.get(feedback_key(feedback_id))
        self.assertEqual(entry["id"], feedback_id)
        self.assertNotEqual(entry["timestamp"], "yesterday")
        self.assertIsNotNone(parse_timestamp(entry["timestamp"]))
        self.assertEqual(self.store.get(FEEDBACK_INDEX_KEY), [feedback_id])

    def test_list_drops_unresolvable_ids(self):
        kept = self.repo.submit({"suggestion": "kept"})
        gone = self.repo.submit({"suggestion": "gone"})
        self.store.delete(feedback_key(gone))

        self.assertEqual([e["id"] for e in self.repo.list()], [kept])

    def test_unindexed_entry_is_not_listed(self):
        self.store.set(feedback_key("orphan"), {"id": "orphan"})
        self.assertEqual(self.repo.list(), [])

    def test_entries_without_timestamp_sort_last(self):
        self.store.set(feedback_key("a"), {"id": "a"})
        self.store.set(feedback_key("b"), {"id": "b", "timestamp": "2024-01-01T00:00:00.000Z"})
        self.store.set(FEEDBACK_INDEX_KEY, ["a", "b"])
        self.assertEqual([e["id"] for e in self.repo.list()], ["b", "a"])

    def test_delete_unknown_id(self):
        kept = self.repo.submit({"suggestion": "kept"})
        self.repo.delete("unknown")
        self.assertEqual(self.store.get(FEEDBACK_INDEX_KEY), [kept])


class TimestampTests(unittest.TestCase):
    def test_utc_timestamp_format(self):
        moment = datetime(2024, 5, 1, 10, 0, 0, 123456, tzinfo=timezone.utc)
        self.assertEqual(utc_timestamp(moment), "2024-05-01T10:00:00.123Z")

    def test_parse_timestamp(self):
        parsed = parse_timestamp("2024-05-01T10:00:00.123Z")
        self.assertEqual(parsed.tzinfo, timezone.utc)
        self.assertIsNone(parse_timestamp("garbage"))
        self.assertIsNone(parse_timestamp(None))


class FeatureFlagTests(unittest.TestCase):
    def test_set_replaces_mapping(self):
        flags = FeatureFlagStore(InMemoryKvStore())
        self.assertEqual(flags.get_flags(), {})
        flags.set_flags({"a": True})
        flags.set_flags({"b": False})
        self.assertEqual(flags.get_flags(), {"b": False})

    def test_set_none_clears_flags(self):
        flags = FeatureFlagStore(InMemoryKvStore())
        flags.set_flags({"a": True})
        flags.set_flags(None)
        self.assertEqual(flags.get_flags(), {})

    def test_absent_flag_is_enabled(self):
        self.assertTrue(is_enabled({}, "showRating"))
        self.assertFalse(is_enabled({"showRating": False}, "showRating"))

    def test_effective_flags(self):
        resolved = effective_flags({"showCategories": False})
        self.assertFalse(resolved["showCategories"])
        self.assertTrue(resolved["showWhatWeWantSection"])


class ReportsTests(unittest.TestCase):
    def test_summarize_empty(self):
        stats = reports.summarize([])
        self.assertEqual(stats["total"], 0)
        self.assertIsNone(stats["average_rating"])
        self.assertEqual(stats["timeline"], [])
        self.assertEqual(stats["rating_distribution"], {str(r): 0 for r in range(1, 6)})

    def test_timeline_keeps_most_recent_days(self):
        entries = [
            {"timestamp": f"2024-01-{day:02d}T12:00:00.000Z"} for day in range(1, 11)
        ]
        entries.append({"timestamp": "2024-01-10T13:00:00.000Z"})
        timeline = reports.summarize(entries)["timeline"]
        self.assertEqual(len(timeline), 7)
        self.assertEqual(timeline[0], {"date": "2024-01-04", "count": 1})
        self.assertEqual(timeline[-1], {"date": "2024-01-10", "count": 2})

    def test_to_csv_defaults(self):
        csv_text = reports.to_csv(
            [
                {
                    "timestamp": "2024-01-02T03:04:05.000Z",
                    "categories": ["services", "general"],
                    "suggestion": "ok",
                    "contactMe": True,
                }
            ]
        )
        header, row = csv_text.strip().split("\n")
        self.assertEqual(
            row,
            '"2024-01-02","Anonymous","N/A","N/A","services; general","ok","N/A","Yes","No"',
        )


if __name__ == "__main__":
    unittest.main()
