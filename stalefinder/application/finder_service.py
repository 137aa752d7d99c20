"""Finder service orchestrating the search and importer lookups."""
import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import List, Optional
from stalefinder.domain.github_interface import IRepositorySearch
from stalefinder.domain.importer_interface import IImporterSource
from stalefinder.domain.models import (
    FinderResult,
    ImporterLookup,
    RepositoryRecord,
    ReportRow,
    SearchCriteria,
)


logger = logging.getLogger(__name__)


class StaleRepositoryFinder:
    """Application service ranking stale repositories by importer count.

    Coordinates the repository search and the importer lookups. Lookups run
    concurrently, bounded by ``concurrency``, and are joined before any row
    is built so the result keeps the search order.
    """

    def __init__(
        self,
        search_client: IRepositorySearch,
        importer_source: IImporterSource,
        concurrency: int = 8
    ):
        """Initialize finder service.

        Args:
            search_client: Repository search implementation
            importer_source: Importer count source implementation
            concurrency: Maximum number of lookups in flight
        """
        if concurrency <= 0:
            raise ValueError(f"concurrency must be positive, got {concurrency}")
        self._search_client = search_client
        self._importer_source = importer_source
        self._concurrency = concurrency

    async def _lookup_all(self, repositories: List[RepositoryRecord]) -> List[ImporterLookup]:
        """Run every lookup concurrently and return outcomes in input order."""
        semaphore = asyncio.Semaphore(self._concurrency)

        async def lookup_one(repository: RepositoryRecord) -> ImporterLookup:
            async with semaphore:
                lookup = await self._importer_source.lookup(repository.import_path)
            if not lookup.ok:
                logger.error(
                    f"problem grabbing {repository.import_path} godoc importers: {lookup.error}"
                )
            return lookup

        return await asyncio.gather(*(lookup_one(repo) for repo in repositories))

    async def find(
        self,
        criteria: SearchCriteria,
        count: int,
        now: Optional[datetime] = None
    ) -> FinderResult:
        """Search for stale repositories and attach their importer counts.

        Args:
            criteria: Search filter
            count: Number of repositories to request
            now: Reference time for age computation (defaults to current UTC time)

        Returns:
            FinderResult with one row per repository, in search order

        Raises:
            SearchError: When the search fails; no lookups are attempted
        """
        start_time = time.time()
        logger.info(f"Starting search for {count} stale repositories")

        repositories = await self._search_client.search_repositories(criteria, count)
        lookups = await self._lookup_all(repositories)

        if now is None:
            now = datetime.now(timezone.utc)
        rows = [
            ReportRow.from_record(repo, lookup, now)
            for repo, lookup in zip(repositories, lookups)
        ]
        failures = sum(1 for lookup in lookups if not lookup.ok)
        duration = time.time() - start_time

        logger.info(
            f"Lookup completed: {len(rows)} repositories, {failures} failed lookups "
            f"in {duration:.2f} seconds"
        )

        return FinderResult(
            rows=rows,
            lookup_failures=failures,
            duration_seconds=duration
        )

    async def close(self) -> None:
        """Close connections."""
        await self._search_client.close()
        await self._importer_source.close()
