"""Abstract base adapter for reading athlete rosters from various sources."""

from abc import ABC, abstractmethod


class RosterImportError(ValueError):
    """Raised when a roster source cannot be turned into athletes."""


class BaseAdapter(ABC):
    @abstractmethod
    def parse(self, data_path: str) -> list:
        """Parse a roster file and return a list of Athlete objects.

        Every athlete gets a freshly generated id. Implementations raise
        RosterImportError instead of returning a partial roster.
        """
        pass
