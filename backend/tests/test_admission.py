"""
Tests for the slot admission gate and the fail-open Redis paths.
"""

import pytest

from learnit.services import admission_service, cache_service
from learnit.services.admission_service import RedisAdmission
from learnit.services.interfaces import OptimisticAdmission
from learnit.services.strategy_factory import get_admission_strategy


class FakeRedis:
    def __init__(self):
        self.store = {}

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.store:
            return None
        self.store[key] = value
        return True

    async def delete(self, key):
        self.store.pop(key, None)


class BrokenRedis:
    async def set(self, *args, **kwargs):
        raise ConnectionError("redis down")

    async def delete(self, *args, **kwargs):
        raise ConnectionError("redis down")

    async def get(self, *args, **kwargs):
        raise ConnectionError("redis down")


def _use_redis(monkeypatch, module, client):
    async def fake_get_redis():
        return client

    monkeypatch.setattr(module, "get_redis", fake_get_redis)


def test_strategy_selection():
    assert isinstance(get_admission_strategy("redis"), RedisAdmission)
    assert isinstance(get_admission_strategy("optimistic"), OptimisticAdmission)
    assert isinstance(get_admission_strategy("queue"), OptimisticAdmission)


@pytest.mark.asyncio
async def test_redis_hold_rejects_second_request(monkeypatch):
    _use_redis(monkeypatch, admission_service, FakeRedis())
    gate = RedisAdmission(hold_seconds=5)

    assert await gate.admit("slot:1:2030-01-01:9:00 AM") is True
    assert await gate.admit("slot:1:2030-01-01:9:00 AM") is False

    await gate.release("slot:1:2030-01-01:9:00 AM")
    assert await gate.admit("slot:1:2030-01-01:9:00 AM") is True


@pytest.mark.asyncio
async def test_redis_failure_fails_open(monkeypatch):
    _use_redis(monkeypatch, admission_service, BrokenRedis())
    gate = RedisAdmission(hold_seconds=5)

    assert await gate.admit("slot:1:2030-01-01:9:00 AM") is True
    # Release errors are logged, not raised
    await gate.release("slot:1:2030-01-01:9:00 AM")


@pytest.mark.asyncio
async def test_redis_disabled_admits():
    assert await RedisAdmission(hold_seconds=5).admit("slot:2:2030-01-01:9:00 AM") is True


@pytest.mark.asyncio
async def test_cache_read_error_falls_back(monkeypatch):
    _use_redis(monkeypatch, cache_service, BrokenRedis())
    assert await cache_service.get_cached_machines(None) is None
