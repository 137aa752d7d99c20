"""Domain models representing core business entities."""
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import List, Optional


# Importer count recorded when the documentation index lookup fails
IMPORTERS_UNKNOWN = -1


@dataclass(frozen=True)
class RepositoryRecord:
    """Immutable domain entity representing a repository returned by search.

    Using frozen dataclass for immutability following clean architecture principles.
    """
    owner: str
    name: str
    url: str
    stars: int
    pushed_at: datetime

    @property
    def full_name(self) -> str:
        """Returns the full repository name (owner/name)."""
        return f"{self.owner}/{self.name}"

    @property
    def import_path(self) -> str:
        """Returns the canonical host/owner/name path, e.g. github.com/foo/bar."""
        for scheme in ("https://", "http://"):
            if self.url.startswith(scheme):
                return self.url[len(scheme):]
        return self.url

    def age_in_days(self, now: Optional[datetime] = None) -> int:
        """Whole days between the last push and ``now``, never negative."""
        if now is None:
            now = datetime.now(timezone.utc)
        hours = (self.pushed_at - now).total_seconds() / 3600.0
        return int(abs(hours) / 24.0)


@dataclass(frozen=True)
class SearchCriteria:
    """Filter used to find popular repositories without recent pushes."""
    min_stars: int = 100
    pushed_before: date = date(2018, 1, 1)
    language: str = "Go"
    sort: str = "stars"
    order: str = "desc"

    def to_query(self) -> str:
        """Render the search qualifier string understood by the code host."""
        return (
            f"stars:>{self.min_stars} "
            f"pushed:<{self.pushed_before.isoformat()} "
            f"language:{self.language} "
            f"sort:{self.sort}-{self.order}"
        )


@dataclass(frozen=True)
class ImporterLookup:
    """Outcome of one importer count lookup."""
    count: int
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, count: int) -> 'ImporterLookup':
        return cls(count=count)

    @classmethod
    def failure(cls, error: str) -> 'ImporterLookup':
        return cls(count=IMPORTERS_UNKNOWN, error=error)


@dataclass(frozen=True)
class ReportRow:
    """One line of the final report."""
    name: str
    stars: int
    age_days: int
    importers: int

    @classmethod
    def from_record(
        cls,
        record: RepositoryRecord,
        lookup: ImporterLookup,
        now: Optional[datetime] = None
    ) -> 'ReportRow':
        """Project a search record and its lookup outcome into a report row."""
        return cls(
            name=record.import_path,
            stars=record.stars,
            age_days=record.age_in_days(now),
            importers=lookup.count
        )


@dataclass(frozen=True)
class FinderResult:
    """Rows of one run, in fetch order, plus run statistics."""
    rows: List[ReportRow]
    lookup_failures: int
    duration_seconds: float
