"""Tests for the finder service using in-memory adapters."""
import asyncio
from datetime import datetime, timezone

import pytest

from stalefinder.application.finder_service import StaleRepositoryFinder
from stalefinder.domain.errors import SearchError
from stalefinder.domain.models import ImporterLookup, RepositoryRecord, SearchCriteria
from tests.fakes import FakeImporters, FakeSearch


NOW = datetime(2018, 6, 1, tzinfo=timezone.utc)


def record(name, stars):
    return RepositoryRecord(
        owner="foo",
        name=name,
        url=f"https://github.com/foo/{name}",
        stars=stars,
        pushed_at=datetime(2017, 6, 1, tzinfo=timezone.utc)
    )


def test_rows_follow_search_order():
    """Rows keep search order even when lookups finish out of order."""
    search = FakeSearch([record("first", 500), record("second", 300)])
    importers = FakeImporters(
        {
            "github.com/foo/first": ImporterLookup.success(10),
            "github.com/foo/second": ImporterLookup.success(20),
        },
        delays={"github.com/foo/first": 0.05}
    )
    finder = StaleRepositoryFinder(search, importers)

    result = asyncio.run(finder.find(SearchCriteria(), 2, now=NOW))

    assert [(r.name, r.stars, r.age_days, r.importers) for r in result.rows] == [
        ("github.com/foo/first", 500, 365, 10),
        ("github.com/foo/second", 300, 365, 20),
    ]
    assert result.lookup_failures == 0


def test_lookups_run_concurrently_within_limit():
    records = [record(f"r{i}", 100 - i) for i in range(6)]
    outcomes = {r.import_path: ImporterLookup.success(1) for r in records}
    delays = {path: 0.02 for path in outcomes}
    importers = FakeImporters(outcomes, delays)
    finder = StaleRepositoryFinder(FakeSearch(records), importers, concurrency=3)

    asyncio.run(finder.find(SearchCriteria(), 6, now=NOW))

    assert importers.max_in_flight == 3
    assert sorted(importers.requested) == sorted(outcomes)


def test_failed_lookup_records_sentinel(caplog):
    """A failed lookup is logged and recorded as -1; the run continues."""
    search = FakeSearch([record("ok", 10), record("broken", 5)])
    importers = FakeImporters({
        "github.com/foo/ok": ImporterLookup.success(3),
        "github.com/foo/broken": ImporterLookup.failure("didn't find anchor"),
    })
    finder = StaleRepositoryFinder(search, importers)

    result = asyncio.run(finder.find(SearchCriteria(), 2, now=NOW))

    assert [r.importers for r in result.rows] == [3, -1]
    assert result.lookup_failures == 1
    assert "github.com/foo/broken" in caplog.text
    assert "didn't find anchor" in caplog.text


def test_search_error_stops_pipeline():
    """No lookups are attempted when the search fails."""
    importers = FakeImporters({})
    finder = StaleRepositoryFinder(FakeSearch(error=SearchError("rate limited")), importers)

    with pytest.raises(SearchError):
        asyncio.run(finder.find(SearchCriteria(), 5))
    assert importers.requested == []


def test_empty_search_result():
    finder = StaleRepositoryFinder(FakeSearch([]), FakeImporters({}))

    result = asyncio.run(finder.find(SearchCriteria(), 5))

    assert result.rows == []
    assert result.lookup_failures == 0


def test_close_closes_adapters():
    search = FakeSearch()
    importers = FakeImporters({})

    asyncio.run(StaleRepositoryFinder(search, importers).close())

    assert search.closed and importers.closed


def test_concurrency_must_be_positive():
    with pytest.raises(ValueError):
        StaleRepositoryFinder(FakeSearch(), FakeImporters({}), concurrency=0)
