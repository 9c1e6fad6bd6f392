"""Data storage and persistence layer"""

from .models import (
    Creator,
    CreatorCategory,
    CreatorProfile,
    OnboardingAnswer,
    Platform,
    PlatformMetrics,
    UserMatch,
    UserMatchRecord,
)
from .database import Database, DuplicateRecordError, PersistenceError

__all__ = [
    "Creator",
    "CreatorCategory",
    "CreatorProfile",
    "OnboardingAnswer",
    "Platform",
    "PlatformMetrics",
    "UserMatch",
    "UserMatchRecord",
    "Database",
    "DuplicateRecordError",
    "PersistenceError",
]
