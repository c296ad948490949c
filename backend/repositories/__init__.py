"""Repository layer for DB access only (CRUD + simple queries).

Repositories accept AsyncSession explicitly and never commit; the request
session (core.dependencies.get_db_session) commits on success.
"""

from .base import BaseRepository
from .cache_repo import CacheRepository
from .disaster_repo import DisasterRepository
from .report_repo import ReportRepository
from .resource_repo import ResourceRepository

__all__ = [
    "BaseRepository",
    "CacheRepository",
    "DisasterRepository",
    "ReportRepository",
    "ResourceRepository",
]
