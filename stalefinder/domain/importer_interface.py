"""Importer count source interface (port)."""
from abc import ABC, abstractmethod
from stalefinder.domain.models import ImporterLookup


class IImporterSource(ABC):
    """Abstract interface for looking up how many packages import a path."""

    @abstractmethod
    async def lookup(self, import_path: str) -> ImporterLookup:
        """Look up the importer count of a package.

        Failures are reported through the returned outcome rather than raised.

        Args:
            import_path: Canonical host/owner/name path

        Returns:
            ImporterLookup with the count, or the sentinel and an error description
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass
