"""Infrastructure layer implementations."""

from src.infrastructure import storage
from src.infrastructure.clock import FixedClock, SystemClock

__all__ = ["storage", "SystemClock", "FixedClock"]
