"""SQLAlchemy models for the disaster response store.

Importing this package registers every table on ``Base.metadata``.
"""

from .base import Base
from .cache_entry import CacheEntry
from .disaster import Disaster
from .report import Report
from .resource import Resource

__all__ = [
    "Base",
    "CacheEntry",
    "Disaster",
    "Report",
    "Resource",
]
