"""FastAPI dependencies.

Resolves the bar repository for a request. Tests override
`get_bar_repository` to inject an InMemoryBarRepository.
"""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sst.common.database import get_db
from sst.data.repository import BarRepository, SqlBarRepository


async def get_bar_repository(db: AsyncSession = Depends(get_db)) -> BarRepository:
    """Provide a repository bound to the request's database session."""
    return SqlBarRepository(db)
