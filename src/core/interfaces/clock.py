"""Clock port."""

from abc import ABC, abstractmethod
from datetime import datetime


class IClock(ABC):
    """Source of the current time for numbering and issued_at.

    now() returns an aware datetime in UTC.
    """

    @abstractmethod
    def now(self) -> datetime:
        pass
