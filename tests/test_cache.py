"""Tests for the fail-open Redis cache and the health endpoints."""

import json
from unittest.mock import MagicMock, patch

import redis

from app.cache import Cache, commission_rule_key, invalidate_commission_cache


def _cache_with(client):
    cache = Cache(enabled=True)
    cache.redis_client = client
    return cache


def test_commission_rule_keys():
    assert commission_rule_key(3) == "commission_rule:3"
    assert commission_rule_key(None) == "commission_rule:global"


def test_values_are_stored_as_json():
    client = MagicMock()
    cache = _cache_with(client)

    assert cache.set("commission_rule:3", {"rule_id": 7}, ttl=300)
    client.setex.assert_called_once_with("commission_rule:3", 300, json.dumps({"rule_id": 7}))

    client.get.return_value = json.dumps({"rule_id": 7})
    assert cache.get("commission_rule:3") == {"rule_id": 7}


def test_redis_errors_read_as_misses():
    client = MagicMock()
    client.get.side_effect = redis.ConnectionError("connection refused")
    client.setex.side_effect = redis.ConnectionError("connection refused")
    cache = _cache_with(client)

    assert cache.get("commission_rule:3") is None
    assert cache.set("commission_rule:3", {"rule_id": 7}) is False


def test_disabled_cache_never_touches_redis():
    cache = Cache(enabled=False)
    with patch("app.cache.get_redis_client") as get_client:
        assert cache.get("commission_rule:3") is None
        assert cache.delete_pattern("commission_rule:*") == 0
    get_client.assert_not_called()


def test_invalidate_all_commission_rules():
    client = MagicMock()
    client.scan_iter.return_value = ["commission_rule:1", "commission_rule:global"]
    client.delete.return_value = 2

    with patch("app.cache.cache", _cache_with(client)):
        assert invalidate_commission_cache() == 2
    client.scan_iter.assert_called_once_with(match="commission_rule:*")
    client.delete.assert_called_once_with("commission_rule:1", "commission_rule:global")


def test_invalidate_one_type():
    client = MagicMock()
    with patch("app.cache.cache", _cache_with(client)):
        assert invalidate_commission_cache(5) == 1
    client.delete.assert_called_once_with("commission_rule:5")


async def test_health_endpoints(client):
    assert (await client.get("/health")).json() == {"status": "healthy"}
    redis_status = (await client.get("/health/redis")).json()
    assert redis_status["status"] == "disabled"
