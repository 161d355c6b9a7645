"""Exception hierarchy shared by loaders, renderer and selection layer."""

from __future__ import annotations


class ChoroMapError(Exception):
    """Base class for every recoverable failure in the map pipeline."""


class FetchError(ChoroMapError):
    """A remote resource was unreachable or answered with a non-2xx status."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {reason}")


class ParseError(ChoroMapError):
    """A CSV or topology document could not be parsed."""


class NotFoundError(ChoroMapError):
    """A geometry container or a country topology could not be located."""
