"""
Assistant script cache coherence.

Every mutation of a company's data calls `invalidate(company_id)` after the
write commits and before the mutation reports success. Cache failures are
logged and swallowed here: the write path stays available and the worst
case is a stale script until the TTL runs out.

Known race: a read that misses, builds, and stores between another request's
write and its invalidation can re-cache data that is already stale. With
`ASSISTANT_CACHE_FENCING` on, each invalidation bumps an in-process
per-company generation and `store` drops a script built under an older one.
The generation counter is per process, so the fence does not span workers
sharing a Redis backend.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from core import cache as cache_backend

logger = logging.getLogger(__name__)

SCRIPT_KEY_PREFIX = "assistant:script:"
DEFAULT_SCRIPT_TTL_S = 300

_generations: dict[str, int] = {}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def script_ttl_s() -> int:
    value = _env_int("ASSISTANT_SCRIPT_TTL_S", DEFAULT_SCRIPT_TTL_S)
    return value if value > 0 else DEFAULT_SCRIPT_TTL_S


def fencing_enabled() -> bool:
    return os.environ.get("ASSISTANT_CACHE_FENCING", "").strip().lower() in {"1", "true", "yes", "on"}


def key_of(company_id: str) -> str:
    return f"{SCRIPT_KEY_PREFIX}{company_id}"


def generation(company_id: str) -> int:
    return _generations.get(company_id, 0)


async def invalidate(company_id: str) -> None:
    """
    Drop the cached script for a company. Idempotent; never raises.
    """
    if fencing_enabled():
        _generations[company_id] = generation(company_id) + 1
    try:
        await cache_backend.cache().delete(key_of(company_id))
    except Exception:
        logger.exception("cache_invalidate_failed company_id=%s", company_id)
        return
    logger.info("cache_invalidated company_id=%s", company_id)


def forget(company_id: str) -> None:
    """
    Drop the fencing generation of a company that no longer exists.
    """
    _generations.pop(company_id, None)


async def lookup(company_id: str) -> dict[str, Any] | None:
    try:
        return await cache_backend.cache().get(key_of(company_id))
    except Exception:
        logger.exception("cache_lookup_failed company_id=%s", company_id)
        return None


async def store(company_id: str, script: dict[str, Any], *, built_at_generation: int | None = None) -> bool:
    """
    Cache a freshly built script. Returns False when nothing was stored.
    """
    if fencing_enabled() and built_at_generation is not None and built_at_generation != generation(company_id):
        logger.info(
            "cache_store_fenced company_id=%s built_at=%s current=%s",
            company_id,
            built_at_generation,
            generation(company_id),
        )
        return False
    try:
        await cache_backend.cache().set(key_of(company_id), script, ttl_s=script_ttl_s())
    except Exception:
        logger.exception("cache_store_failed company_id=%s", company_id)
        return False
    return True
