"""Error taxonomy for the stale repository finder."""


class FinderError(Exception):
    """Base class for all finder errors."""
    pass


class ConfigError(FinderError):
    """Raised when required configuration is missing or invalid."""
    pass


class SearchError(FinderError):
    """Raised when the repository search cannot be completed."""
    pass


class ScrapeError(FinderError):
    """Base class for importer count lookup failures."""
    pass


class PageFetchError(ScrapeError):
    """The documentation page could not be fetched."""
    pass


class MarkupParseError(ScrapeError):
    """The documentation page could not be parsed into a tree."""
    pass


class ImportersNotFoundError(ScrapeError):
    """No importers anchor exists in the document."""
    pass


class ImporterCountParseError(ScrapeError):
    """The importers anchor text does not start with a count."""
    pass
