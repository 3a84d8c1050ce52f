from typing import Callable, Mapping, Optional, Tuple, Union

import requests
import urllib3

from pagefetch.domain.http_response import HttpResponse
from pagefetch.exceptions import HttpFetchError

Timeout = Union[float, Tuple[float, float]]


class HttpService:
    """
    HTTP client wrapper for issuing GET requests.

    Requires http_client callable for dependency injection, normally the
    `get` method of the shared pooled session. Tests pass a Mock instead.
    """

    def __init__(self, http_client: Callable, timeout: Timeout = (10.0, 10.0)):
        self.http_client = http_client
        self.timeout = timeout

    def fetch(self, url: str, headers: Optional[Mapping[str, str]] = None) -> HttpResponse:
        """Fetch URL and return status code, raw body bytes and Content-Type.

        The body is read fully into memory. Transport failures, including an
        exhausted connection pool, are raised as HttpFetchError.
        """
        try:
            resp = self.http_client(url, headers=dict(headers or {}), timeout=self.timeout)
            content = resp.content if resp.status_code == 200 else b""
        except (requests.exceptions.RequestException, urllib3.exceptions.HTTPError) as e:
            raise HttpFetchError(url, e) from e

        # Extract Content-Type if response has headers; let real exceptions bubble up.
        ct = None
        if hasattr(resp, 'headers'):
            ct = resp.headers.get('Content-Type')

        return HttpResponse(resp.status_code, content, ct)
