"""Price-history storage — repository interface and implementations."""

from __future__ import annotations

from sst.data.repository import BarRepository, InMemoryBarRepository, SqlBarRepository

__all__ = ["BarRepository", "InMemoryBarRepository", "SqlBarRepository"]
