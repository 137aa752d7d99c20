"""Documentation index scraper reporting how many packages import a path."""
import asyncio
import logging
from typing import Iterator, Optional
import aiohttp
from bs4 import BeautifulSoup, Tag
from bs4.element import PageElement
from stalefinder.config import DEFAULT_USER_AGENT
from stalefinder.domain.errors import MarkupParseError, PageFetchError, ScrapeError
from stalefinder.domain.importer_interface import IImporterSource
from stalefinder.domain.markup import MarkupElement, find_importer_count
from stalefinder.domain.models import ImporterLookup


logger = logging.getLogger(__name__)


class SoupElement:
    """Adapts a BeautifulSoup node to the MarkupElement protocol."""

    def __init__(self, node: PageElement):
        self._node = node

    @property
    def tag(self) -> Optional[str]:
        if isinstance(self._node, BeautifulSoup) or not isinstance(self._node, Tag):
            return None
        return self._node.name

    def get_attribute(self, name: str) -> Optional[str]:
        if not isinstance(self._node, Tag):
            return None
        value = self._node.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def children(self) -> Iterator[MarkupElement]:
        if isinstance(self._node, Tag):
            for child in self._node.children:
                yield SoupElement(child)

    def text(self) -> str:
        return self._node.get_text()


def parse_document(markup) -> SoupElement:
    """Parse an HTML page into a walkable tree.

    Raises:
        MarkupParseError: When the markup cannot be parsed
    """
    try:
        soup = BeautifulSoup(markup, "html.parser")
    except Exception as e:
        raise MarkupParseError(f"couldn't parse html: {e}") from e
    return SoupElement(soup)


def parse_importer_count(markup) -> int:
    """Extract the importer count from a documentation page."""
    return find_importer_count(parse_document(markup))


class GodocImporterScraper(IImporterSource):
    """Scrapes importer counts from a godoc-style documentation index.

    Implements the IImporterSource port. Pages are fetched with a custom
    User-Agent; a single aiohttp session is shared by concurrent lookups.
    """

    def __init__(
        self,
        base_url: str = "https://godoc.org",
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30
    ):
        """Initialize the scraper.

        Args:
            base_url: Root URL of the documentation index
            user_agent: Client identifier sent with every request
            timeout: Total timeout per request in seconds
        """
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent
        self._timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    def _get_session(self) -> aiohttp.ClientSession:
        """Create the HTTP session (lazy initialization)."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": self._user_agent},
                timeout=aiohttp.ClientTimeout(total=self._timeout)
            )
        return self._session

    def page_url(self, import_path: str) -> str:
        """URL of the documentation page for an import path."""
        return f"{self._base_url}/{import_path.lstrip('/')}"

    async def _fetch_page(self, url: str) -> bytes:
        """Fetch a documentation page body.

        Raises:
            PageFetchError: On network failure or an error status
        """
        session = self._get_session()
        try:
            async with session.get(url) as response:
                if response.status >= 400:
                    raise PageFetchError(f"problem loading {url}: HTTP {response.status}")
                return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise PageFetchError(f"problem loading {url}: {e!r}") from e

    async def count_importers(self, import_path: str) -> int:
        """Fetch and parse the importer count of a package.

        Raises:
            ScrapeError: On any fetch or parse failure
        """
        url = self.page_url(import_path)
        logger.debug(f"Fetching importers page {url}")
        body = await self._fetch_page(url)
        return parse_importer_count(body)

    async def lookup(self, import_path: str) -> ImporterLookup:
        """Look up the importer count, reporting failures as an outcome."""
        try:
            count = await self.count_importers(import_path)
        except ScrapeError as e:
            return ImporterLookup.failure(str(e))
        return ImporterLookup.success(count)

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None
