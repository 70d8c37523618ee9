"""
Unit tests for the Redis cache store, run against fakeredis.
"""

from unittest.mock import MagicMock, patch

import pytest

from errors.codes import ErrorCode
from errors.exceptions import AppException
from session.redis_store import DEFAULT_STORE_PREFIX, RedisCacheStore


@pytest.fixture
def store(fake_redis) -> RedisCacheStore:
    return RedisCacheStore(client=fake_redis, prefix="app_cache:", connection_prefix="tenant1:")


class TestKeyLayout:
    """Tests for prefix handling."""

    def test_physical_key_has_both_prefixes(self, store, fake_redis):
        """Test that keys are stored under connection prefix + store prefix."""
        store.set("abc", "value", 60)

        assert fake_redis.get("tenant1:app_cache:abc") == b"value"

    def test_prefix_accessors(self, store):
        """Test the store-level and connection-level prefix accessors."""
        assert store.prefix == "app_cache:"
        assert store.connection_prefix() == "tenant1:"

    def test_default_prefixes(self, fake_redis):
        """Test the default store prefix and empty connection prefix."""
        store = RedisCacheStore(client=fake_redis)

        assert store.prefix == DEFAULT_STORE_PREFIX
        assert store.connection_prefix() == ""

    def test_keys_returns_physical_keys(self, store):
        """Test that keys() lists raw keys, prefixes included."""
        store.set("abc", "1", 60)
        store.set("def", "2", 60)

        assert sorted(store.keys("*")) == ["tenant1:app_cache:abc", "tenant1:app_cache:def"]


class TestOperations:
    """Tests for get/set/delete/many/flush."""

    def test_get_missing_returns_none(self, store):
        assert store.get("missing") is None

    def test_set_applies_ttl(self, store, fake_redis):
        """Test that values expire after the given TTL."""
        store.set("abc", "value", 1800)

        assert 0 < fake_redis.ttl("tenant1:app_cache:abc") <= 1800

    def test_delete_is_idempotent(self, store):
        """Test that deleting a missing key does not raise."""
        store.set("abc", "value", 60)

        assert store.delete("abc") is True
        assert store.delete("abc") is True
        assert store.get("abc") is None

    def test_many_maps_every_requested_key(self, store):
        """Test that many() returns None for missing keys."""
        store.set("abc", "1", 60)

        assert store.many(["abc", "missing"]) == {"abc": "1", "missing": None}

    def test_many_with_no_keys(self, store):
        """Test that an empty request does not hit Redis."""
        assert store.many([]) == {}

    def test_flush_removes_unrelated_keys(self, store, fake_redis):
        """Test that flush wipes the whole database, not only sessions."""
        store.set("abc", "1", 60)
        fake_redis.set("someone-elses-key", "x")

        assert store.flush() is True
        assert fake_redis.keys("*") == []

    def test_text_is_decoded_from_raw_bytes(self, store):
        store.set("abc", "välue", 60)

        assert store.get("abc") == "välue"
        assert store.many(["abc"]) == {"abc": "välue"}

    def test_non_utf8_value_reads_as_missing(self, store, fake_redis):
        """Test that a corrupted value does not raise or spoil the rest of the batch."""
        store.set("good", "1", 60)
        fake_redis.set("tenant1:app_cache:bad", b"\xff\xfe\x00garbage")

        assert store.get("bad") is None
        assert store.many(["good", "bad"]) == {"good": "1", "bad": None}

    def test_non_utf8_keys_are_skipped(self, store, fake_redis):
        store.set("abc", "1", 60)
        fake_redis.set(b"tenant1:app_cache:\xff", "x")

        assert store.keys("*") == ["tenant1:app_cache:abc"]

    def test_bytes_responses_are_decoded(self):
        """Test that raw client replies are returned as text."""
        client = MagicMock()
        client.get.return_value = b"value"
        client.mget.return_value = [b"one", None]
        client.scan_iter.return_value = iter([b"app_cache:abc"])
        store = RedisCacheStore(client=client, prefix="app_cache:")

        assert store.get("abc") == "value"
        assert store.many(["abc", "def"]) == {"abc": "one", "def": None}
        assert store.keys() == ["app_cache:abc"]


class TestConnection:
    """Tests for connection management and health checks."""

    def test_operations_require_client(self):
        """Test that using an unconnected store raises STORE_NOT_CONNECTED."""
        store = RedisCacheStore(redis_url="redis://localhost:6379/0")

        with pytest.raises(AppException) as exc_info:
            store.get("abc")

        assert exc_info.value.error_code == ErrorCode.STORE_NOT_CONNECTED

    def test_connect_requires_url(self):
        """Test that connect() without a URL raises."""
        with pytest.raises(AppException):
            RedisCacheStore().connect()

    def test_from_url_connects(self):
        """Test that from_url builds a client for the URL."""
        with patch("redis.from_url") as from_url:
            store = RedisCacheStore.from_url("redis://cache:6379/2", prefix="p:")

        from_url.assert_called_once_with("redis://cache:6379/2")
        assert store.client is from_url.return_value
        assert store.prefix == "p:"

    def test_disconnect_closes_client(self):
        client = MagicMock()
        store = RedisCacheStore(client=client)

        store.disconnect()

        client.close.assert_called_once()
        assert store.client is None

    def test_health_check_healthy(self, store):
        assert store.health_check() is True

    def test_health_check_without_client(self):
        assert RedisCacheStore().health_check() is False

    def test_health_check_swallows_connection_errors(self):
        """Test that a failing PING reports unhealthy instead of raising."""
        client = MagicMock()
        client.ping.side_effect = ConnectionError("refused")

        assert RedisCacheStore(client=client).health_check() is False

    def test_store_errors_propagate(self):
        """Test that connection errors on regular operations are not swallowed."""
        client = MagicMock()
        client.get.side_effect = ConnectionError("refused")

        with pytest.raises(ConnectionError):
            RedisCacheStore(client=client).get("abc")
