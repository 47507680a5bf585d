"""Unit tests for MemoryCacheProvider."""

from __future__ import annotations

import pytest

from toolbench.providers.cache.memory_cache import MemoryCacheProvider


@pytest.mark.asyncio
async def test_set_and_get() -> None:
    cache = MemoryCacheProvider()
    await cache.set("replicate:account", {"username": "studio"})
    assert await cache.get("replicate:account") == {"username": "studio"}


@pytest.mark.asyncio
async def test_missing_key() -> None:
    cache = MemoryCacheProvider()
    assert await cache.get("nope") is None


@pytest.mark.asyncio
async def test_zero_ttl_is_never_served() -> None:
    cache = MemoryCacheProvider()
    await cache.set("voices", ["v1"], ttl=0)
    assert await cache.get("voices") is None


@pytest.mark.asyncio
async def test_delete() -> None:
    cache = MemoryCacheProvider()
    await cache.set("k", 1)
    await cache.delete("k")
    await cache.delete("k")
    assert await cache.get("k") is None
