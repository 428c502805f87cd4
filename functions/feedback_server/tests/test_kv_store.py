import json
import time
import unittest
from unittest.mock import MagicMock, patch

from feedback_server.config import Settings
from feedback_server.dependencies import build_kv_store
from feedback_server.kv_store import InMemoryKvStore, RedisKvStore, SqlKvStore


class InMemoryKvStoreTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryKvStore()

    def test_get_set_delete(self):
        self.assertIsNone(self.store.get("missing"))
        self.store.set("k", {"a": [1, 2]})
        self.assertEqual(self.store.get("k"), {"a": [1, 2]})
        self.store.delete("k")
        self.assertIsNone(self.store.get("k"))
        # Deleting again is a no-op.
        self.store.delete("k")

    def test_values_are_copied(self):
        value = {"ids": ["a"]}
        self.store.set("k", value)
        value["ids"].append("b")
        fetched = self.store.get("k")
        fetched["ids"].append("c")
        self.assertEqual(self.store.get("k"), {"ids": ["a"]})

    def test_ttl_expires_entries(self):
        now = time.time()
        with patch("feedback_server.kv_store.time.time", return_value=now):
            self.store.set("k", "v", ttl=10)
            self.assertEqual(self.store.get("k"), "v")
        with patch("feedback_server.kv_store.time.time", return_value=now + 11):
            self.assertIsNone(self.store.get("k"))
        self.assertNotIn("k", self.store.items)

    def test_reset(self):
        self.store.set("k", 1)
        self.store.reset()
        self.assertIsNone(self.store.get("k"))


class SqlKvStoreTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL store logic.
    """

    def setUp(self):
        self.store = SqlKvStore("sqlite+pysqlite:///:memory:")

    def test_requires_url(self):
        with self.assertRaises(ValueError):
            SqlKvStore("")

    def test_roundtrip_and_overwrite(self):
        self.store.set("feedback_all_ids", ["a"])
        self.store.set("feedback_all_ids", ["a", "b"])
        self.assertEqual(self.store.get("feedback_all_ids"), ["a", "b"])

    def test_delete(self):
        self.store.set("feature_flags", {"a": True})
        self.store.delete("feature_flags")
        self.assertIsNone(self.store.get("feature_flags"))
        self.store.delete("feature_flags")

    def test_ttl_expires_entries(self):
        now = time.time()
        with patch("feedback_server.kv_store.time.time", return_value=now):
            self.store.set("admin_session_x", {"expires_at": now + 5}, ttl=5)
            self.assertIsNotNone(self.store.get("admin_session_x"))
        with patch("feedback_server.kv_store.time.time", return_value=now + 6):
            self.assertIsNone(self.store.get("admin_session_x"))

    def test_overwrite_without_ttl_clears_expiry(self):
        now = time.time()
        with patch("feedback_server.kv_store.time.time", return_value=now):
            self.store.set("k", 1, ttl=5)
            self.store.set("k", 2)
        with patch("feedback_server.kv_store.time.time", return_value=now + 60):
            self.assertEqual(self.store.get("k"), 2)


class RedisKvStoreTests(unittest.TestCase):
    def setUp(self):
        patcher = patch("feedback_server.kv_store.redis.Redis.from_url")
        self.from_url = patcher.start()
        self.addCleanup(patcher.stop)
        self.client = MagicMock()
        self.from_url.return_value = self.client
        self.store = RedisKvStore(url="redis://localhost:6379/0")

    def test_set_encodes_json_with_ttl(self):
        self.store.set("admin_session_t", {"expires_at": 1.5}, ttl=60)
        self.client.set.assert_called_once_with(
            "feedback:admin_session_t", json.dumps({"expires_at": 1.5}), ex=60
        )

    def test_set_without_ttl(self):
        self.store.set("feature_flags", {})
        self.client.set.assert_called_once_with("feedback:feature_flags", "{}", ex=None)

    def test_get_decodes_json(self):
        self.client.get.return_value = b'["a", "b"]'
        self.assertEqual(self.store.get("feedback_all_ids"), ["a", "b"])
        self.client.get.assert_called_once_with("feedback:feedback_all_ids")

    def test_get_missing(self):
        self.client.get.return_value = None
        self.assertIsNone(self.store.get("nope"))

    def test_delete(self):
        self.store.delete("feedback_1")
        self.client.delete.assert_called_once_with("feedback:feedback_1")


class BuildKvStoreTests(unittest.TestCase):
    def test_defaults_to_in_memory(self):
        store = build_kv_store(Settings(database_url=None, redis_url=None))
        self.assertIsInstance(store, InMemoryKvStore)

    def test_in_memory_toggle_wins(self):
        store = build_kv_store(
            Settings(
                use_in_memory_backends=True,
                database_url="sqlite+pysqlite:///:memory:",
            )
        )
        self.assertIsInstance(store, InMemoryKvStore)

    def test_database_url_selects_sql(self):
        store = build_kv_store(
            Settings(database_url="sqlite+pysqlite:///:memory:", redis_url=None)
        )
        self.assertIsInstance(store, SqlKvStore)

    @patch("feedback_server.kv_store.redis.Redis.from_url")
    def test_redis_url_selects_redis(self, from_url):
        store = build_kv_store(
            Settings(
                database_url=None,
                redis_url="redis://localhost:6379/0",
                redis_key_prefix="fb:",
            )
        )
        self.assertIsInstance(store, RedisKvStore)
        self.assertEqual(store.key_prefix, "fb:")
        from_url.assert_called_once_with("redis://localhost:6379/0")


if __name__ == "__main__":
    unittest.main()
