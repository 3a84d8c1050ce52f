from typing import NamedTuple, Optional


class HttpResponse(NamedTuple):
    """Raw response from an HTTP fetch: status, undecoded body and Content-Type."""
    status_code: int
    content: bytes
    content_type: Optional[str] = None
