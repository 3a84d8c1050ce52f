from __future__ import annotations

import logging
import random
from typing import Optional, Sequence
from urllib.parse import urlsplit, urlunsplit

from pagefetch.charset import decode_body
from pagefetch.exceptions import HttpFetchError, InvalidUrlError
from pagefetch.services.http_service import HttpService
from pagefetch.user_agents import USER_AGENTS

logger = logging.getLogger(__name__)

HTTP_SCHEMES = ("http://", "https://")

BASE_HEADERS = {
    "Accept": "*/*",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
}

STATUS_DESCRIPTIONS = {
    400: "bad request syntax",
    401: "resource requires authentication",
    403: "resource requires authorization",
    404: "resource not found",
    502: "bad gateway",
    503: "service unavailable",
    504: "gateway timeout",
}


def is_http_url(url: object) -> bool:
    return isinstance(url, str) and url[:8].lower().startswith(HTTP_SCHEMES)


def build_request_url(url: str) -> str:
    """Normalize `url` into a request target: scheme, host[:port], path and query.

    The fragment is dropped and an empty path becomes "/".
    """
    try:
        parts = urlsplit(url.strip())
        hostname = parts.hostname
    except ValueError as e:
        raise InvalidUrlError(url, str(e)) from e
    if not hostname:
        raise InvalidUrlError(url, "missing host")
    return urlunsplit((parts.scheme.lower(), parts.netloc, parts.path or "/", parts.query, ""))


def describe_status(status_code: int) -> str:
    return STATUS_DESCRIPTIONS.get(status_code, "request failed")


class PageFetcher:
    """Fetch web pages as decoded text through a shared HttpService.

    `fetch` never raises for network, HTTP or decoding problems: it logs one
    error line naming the URL and returns None.
    """

    def __init__(
        self,
        http_service: HttpService,
        user_agents: Sequence[str] = USER_AGENTS,
        rng: Optional[random.Random] = None,
        session=None,
    ):
        if not user_agents:
            raise ValueError("user_agents must not be empty")
        self.http_service = http_service
        self.user_agents = tuple(user_agents)
        self._rng = rng or random.Random()
        self._session = session

    def build_headers(self) -> dict:
        headers = dict(BASE_HEADERS)
        headers["User-Agent"] = self._rng.choice(self.user_agents)
        return headers

    def fetch(self, url: Optional[str]) -> Optional[str]:
        if not is_http_url(url):
            return None

        try:
            target = build_request_url(url)
        except InvalidUrlError as e:
            logger.error("Invalid URL [%s]: %s", url, e.reason)
            return None

        try:
            response = self.http_service.fetch(target, headers=self.build_headers())
        except HttpFetchError as e:
            logger.error("Fetch error [%s]: %s", url, e.original)
            return None

        if response.status_code != 200:
            logger.error("%d, %s [%s]", response.status_code, describe_status(response.status_code), url)
            return None

        try:
            return decode_body(response.content, response.content_type)
        except (LookupError, UnicodeError) as e:
            logger.error("Cannot decode body [%s]: %s", url, e)
            return None

    def close(self) -> None:
        """Close the pooled session, if this fetcher owns one."""
        if self._session is not None:
            self._session.close()
