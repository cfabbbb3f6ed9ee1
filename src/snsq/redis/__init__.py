"""Redis-backed resource store (optional extra: snsq[redis])."""

from __future__ import annotations

from .store import RedisResourceStore

__all__ = ["RedisResourceStore"]
