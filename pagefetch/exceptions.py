"""Custom exceptions for pagefetch services."""


class InvalidUrlError(Exception):
    """Raised when a URL cannot be turned into a request target."""

    def __init__(self, url: str, reason: str = "malformed"):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid URL '{url}': {reason}")


class HttpFetchError(Exception):
    """Raised when an HTTP fetch fails due to network/transport errors."""

    def __init__(self, url: str, original: Exception):
        self.url = url
        self.original = original
        super().__init__(f"HTTP fetch failed for {url}: {original}")
