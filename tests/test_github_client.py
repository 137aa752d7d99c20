"""Tests for the GitHub search client."""
import asyncio
from datetime import datetime, timezone

import pytest

from stalefinder.domain.errors import SearchError
from stalefinder.domain.models import SearchCriteria
from stalefinder.infrastructure.github_client import GitHubSearchClient, record_from_node


def node(name_with_owner, stars, pushed_at="2017-03-04T05:06:07Z"):
    return {
        "nameWithOwner": name_with_owner,
        "url": f"https://github.com/{name_with_owner}",
        "stargazerCount": stars,
        "pushedAt": pushed_at,
    }


class StubSearchClient(GitHubSearchClient):
    """Search client answering from a canned GraphQL result."""

    def __init__(self, result=None, error=None):
        super().__init__("token")
        self.result = result
        self.error = error
        self.calls = []

    async def _execute_query(self, search_query: str, first: int) -> dict:
        self.calls.append((search_query, first))
        if self.error is not None:
            raise self.error
        return self.result


def test_record_from_node():
    """GraphQL nodes map onto domain records."""
    record = record_from_node(node("gorilla/mux", 500))

    assert record.owner == "gorilla"
    assert record.name == "mux"
    assert record.stars == 500
    assert record.import_path == "github.com/gorilla/mux"
    assert record.pushed_at == datetime(2017, 3, 4, 5, 6, 7, tzinfo=timezone.utc)


def test_search_sends_query_and_page_size():
    client = StubSearchClient({"search": {"nodes": [node("a/one", 500), node("b/two", 300)]}})

    records = asyncio.run(client.search_repositories(SearchCriteria(), 2))

    assert client.calls == [("stars:>100 pushed:<2018-01-01 language:Go sort:stars-desc", 2)]
    assert [r.full_name for r in records] == ["a/one", "b/two"]
    assert [r.stars for r in records] == [500, 300]


def test_search_clamps_page_size():
    """A single search page holds at most 100 repositories."""
    client = StubSearchClient({"search": {"nodes": []}})

    records = asyncio.run(client.search_repositories(SearchCriteria(), 250))

    assert records == []
    assert client.calls[0][1] == 100


def test_search_skips_empty_nodes():
    client = StubSearchClient({"search": {"nodes": [None, node("a/one", 5), {}]}})

    records = asyncio.run(client.search_repositories(SearchCriteria(), 3))

    assert [r.full_name for r in records] == ["a/one"]


def test_search_rejects_non_positive_count():
    client = StubSearchClient({"search": {"nodes": []}})

    with pytest.raises(ValueError):
        asyncio.run(client.search_repositories(SearchCriteria(), 0))
    assert client.calls == []


def test_transport_error_becomes_search_error(caplog):
    """Network, auth and rate limit failures surface as SearchError."""
    client = StubSearchClient(error=ConnectionError("connection refused"))

    with pytest.raises(SearchError) as exc_info:
        asyncio.run(client.search_repositories(SearchCriteria(), 5))
    assert "connection refused" in str(exc_info.value)
    # reporting the failure is left to the caller
    assert not [r for r in caplog.records if r.levelname == "ERROR"]


def test_malformed_payload_becomes_search_error():
    client = StubSearchClient(
        {"search": {"nodes": [{"url": "https://github.com/x", "pushedAt": "2017-01-01T00:00:00Z"}]}}
    )

    with pytest.raises(SearchError):
        asyncio.run(client.search_repositories(SearchCriteria(), 1))


def test_close_without_connection():
    asyncio.run(StubSearchClient().close())


def test_search_skips_nodes_without_push_date(caplog):
    """A repository with a null pushedAt is dropped instead of failing the search."""
    nodes = [node("a/never-pushed", 50, pushed_at=None), node("b/two", 30)]
    client = StubSearchClient({"search": {"nodes": nodes}})

    records = asyncio.run(client.search_repositories(SearchCriteria(), 2))

    assert [r.full_name for r in records] == ["b/two"]
    assert "a/never-pushed" in caplog.text


def test_transport_presents_bearer_token():
    """The GraphQL transport targets GitHub with the access token as a bearer credential."""
    client = GitHubSearchClient("secret-token", timeout=12)

    client._init_client()

    assert client._transport.url == "https://api.github.com/graphql"
    assert client._transport.headers["Authorization"] == "Bearer secret-token"
    assert client._client.execute_timeout == 12
