"""Error types for page generation.

Every error aborts generation of the page that raised it. Nothing here is
caught or retried inside the pipeline; the builder collects failures and
reports them to the operator.
"""

from dataclasses import dataclass


class DocpagesError(Exception):
    """Base class for page generation errors."""


class ContentNotFoundError(DocpagesError):
    """Content file is missing from the local project tree."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Content file not found: {path}")


class FetchError(DocpagesError):
    """Remote content could not be retrieved or the response is unusable."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class ParseError(DocpagesError):
    """Content could not be parsed or rendered."""


@dataclass(frozen=True)
class PageFailure:
    """A page that failed to build."""

    collection: str
    url: str
    error: Exception

    def __str__(self) -> str:
        return f"/{self.url} ({self.collection}): {self.error}"


class BuildError(DocpagesError):
    """One or more pages failed to build."""

    def __init__(self, failures: list[PageFailure]) -> None:
        self.failures = failures
        super().__init__(f"{len(failures)} page(s) failed to build")
