"""Repository search interface (port).

This is the anti-corruption layer that shields the domain from GitHub API specifics.
"""
from abc import ABC, abstractmethod
from typing import List
from stalefinder.domain.models import RepositoryRecord, SearchCriteria


class IRepositorySearch(ABC):
    """Abstract interface for repository search operations."""

    @abstractmethod
    async def search_repositories(
        self,
        criteria: SearchCriteria,
        count: int
    ) -> List[RepositoryRecord]:
        """Fetch a single page of repositories matching the criteria.

        Args:
            criteria: Search filter and sort order
            count: Page size, must be positive

        Returns:
            Up to ``count`` records in the requested sort order

        Raises:
            SearchError: When the search cannot be completed
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass
