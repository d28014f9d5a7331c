from datetime import timedelta

from trustgate.ttlmap import CacheConfig, CacheKeys, TTLMap


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_set_and_get_before_expiry():
    clock = FakeClock()
    cache = TTLMap(10, clock=clock)
    cache.set("k", {"v": 1})
    clock.now += 9
    assert cache.get("k") == {"v": 1}
    assert "k" in cache


def test_entry_expires():
    clock = FakeClock()
    cache = TTLMap(timedelta(seconds=10), clock=clock)
    cache.set("k", "v")
    clock.now += 10
    assert cache.get("k") is None
    assert "k" not in cache


def test_set_refreshes_expiry():
    clock = FakeClock()
    cache = TTLMap(5, clock=clock)
    cache.set("k", "old")
    clock.now += 4
    cache.set("k", "new")
    clock.now += 4
    assert cache.get("k") == "new"


def test_delete_and_missing():
    cache = TTLMap(60)
    cache.set("k", "v")
    cache.delete("k")
    cache.delete("absent")
    assert cache.get("k") is None


def test_timedelta_ttl_converted():
    assert TTLMap(timedelta(minutes=5)).ttl == TTLMap(300).ttl


def test_cache_keys_format():
    keys = CacheKeys()
    assert keys.gateway % "g1" == "gateway:g1"
    assert keys.rules % "g1" == "rules:g1"


def test_cache_config_holds_values():
    password = "password"
    config = CacheConfig(host="localhost", port=6379, password=password, db=1)
    assert (config.host, config.port, config.db) == ("localhost", 6379, 1)