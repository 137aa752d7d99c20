"""GitHub GraphQL API client implementation for repository search."""
import logging
from datetime import datetime
from typing import List, Optional
from gql import gql, Client
from gql.transport.aiohttp import AIOHTTPTransport
from stalefinder.domain.errors import SearchError
from stalefinder.domain.github_interface import IRepositorySearch
from stalefinder.domain.models import RepositoryRecord, SearchCriteria


logger = logging.getLogger(__name__)

# GitHub returns at most 100 nodes per search page
MAX_PAGE_SIZE = 100


def parse_timestamp(value: str) -> datetime:
    """Parse a GitHub ISO-8601 timestamp into an aware datetime."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def record_from_node(node: dict) -> RepositoryRecord:
    """Transform a GitHub search node into a domain record."""
    owner, name = node["nameWithOwner"].split("/", 1)
    return RepositoryRecord(
        owner=owner,
        name=name,
        url=node["url"],
        stars=node.get("stargazerCount", 0),
        pushed_at=parse_timestamp(node["pushedAt"])
    )


def records_from_nodes(nodes: List[Optional[dict]]) -> List[RepositoryRecord]:
    """Transform search nodes, skipping repositories GitHub reports without a push date."""
    repositories = []
    for node in nodes:
        if not node:
            continue
        if not node.get("pushedAt"):
            logger.warning(f"Skipping {node.get('nameWithOwner')}: no push date reported")
            continue
        repositories.append(record_from_node(node))
    return repositories


class GitHubSearchClient(IRepositorySearch):
    """GitHub GraphQL search client.

    Implements the IRepositorySearch port, providing an anti-corruption layer
    between the domain and GitHub's API. Only a single page is ever requested.
    """

    ENDPOINT = "https://api.github.com/graphql"

    SEARCH_QUERY = gql("""
        query SearchStaleRepositories($searchQuery: String!, $first: Int!) {
            search(query: $searchQuery, type: REPOSITORY, first: $first) {
                repositoryCount
                nodes {
                    ... on Repository {
                        nameWithOwner
                        url
                        stargazerCount
                        pushedAt
                    }
                }
            }
            rateLimit {
                remaining
                resetAt
            }
        }
    """)

    def __init__(self, access_token: str, timeout: int = 30):
        """Initialize GitHub client.

        Args:
            access_token: GitHub personal access token
            timeout: Request timeout in seconds
        """
        self._access_token = access_token
        self._timeout = timeout
        self._transport: Optional[AIOHTTPTransport] = None
        self._client: Optional[Client] = None

    def _init_client(self) -> None:
        """Initialize the GraphQL client (lazy initialization)."""
        if self._client is None:
            headers = {"Authorization": f"Bearer {self._access_token}"}
            self._transport = AIOHTTPTransport(
                url=self.ENDPOINT,
                headers=headers
            )
            self._client = Client(
                transport=self._transport,
                fetch_schema_from_transport=False,
                execute_timeout=self._timeout
            )

    async def _execute_query(self, search_query: str, first: int) -> dict:
        """Execute the search query.

        Args:
            search_query: GitHub search qualifier string
            first: Page size

        Returns:
            Query result dictionary
        """
        self._init_client()
        async with self._client as session:
            result = await session.execute(
                self.SEARCH_QUERY,
                variable_values={"searchQuery": search_query, "first": first}
            )

        rate_limit = result.get("rateLimit") or {}
        logger.info(
            f"Rate limit remaining: {rate_limit.get('remaining')}, "
            f"resets at: {rate_limit.get('resetAt')}"
        )
        return result

    async def search_repositories(
        self,
        criteria: SearchCriteria,
        count: int
    ) -> List[RepositoryRecord]:
        """Fetch one page of repositories matching the criteria.

        Args:
            criteria: Search filter and sort order
            count: Number of repositories to request

        Returns:
            Repository records, most starred first

        Raises:
            ValueError: When count is not positive
            SearchError: When the request or the response handling fails
        """
        if count <= 0:
            raise ValueError(f"count must be a positive integer, got {count}")

        first = count
        if first > MAX_PAGE_SIZE:
            logger.warning(
                f"Requested {count} repositories but a search page holds at most "
                f"{MAX_PAGE_SIZE}; only the first {MAX_PAGE_SIZE} will be listed"
            )
            first = MAX_PAGE_SIZE

        search_query = criteria.to_query()
        logger.info(f"Searching GitHub for {first} repositories: {search_query}")

        try:
            result = await self._execute_query(search_query, first)
            nodes = (result.get("search") or {}).get("nodes") or []
            repositories = records_from_nodes(nodes)
        except Exception as e:
            raise SearchError(f"problem reading github repositories: {e}") from e

        logger.info(f"Search returned {len(repositories)} repositories")
        return repositories

    async def close(self) -> None:
        """Close the GraphQL transport."""
        if self._transport:
            await self._transport.close()
            self._transport = None
            self._client = None
