"""Charset resolution for fetched pages.

Precedence: the `charset` parameter of the Content-Type header, then a
`<meta ... charset=...>` tag inside `<head>`, then UTF-8.
"""
import re
from email.message import Message
from typing import Optional

DEFAULT_CHARSET = "utf-8"

_META_CHARSET_RE = re.compile(
    r"<head[\s>][\s\S]*?<meta[\s\S]*?charset\s*=\s*[\"']?\s*([a-z0-9_.:\-]+)",
    re.IGNORECASE,
)


def charset_from_content_type(content_type: Optional[str]) -> Optional[str]:
    """Return the lower-cased charset declared in a Content-Type value, if any."""
    if not content_type:
        return None
    msg = Message()
    msg["Content-Type"] = content_type
    charset = msg.get_content_charset()
    return charset or None


def detect_charset(data: bytes) -> Optional[str]:
    """Sniff a charset from an HTML meta tag in `data`.

    The bytes are decoded provisionally as UTF-8 (bad sequences replaced)
    before scanning, so only ASCII-compatible encodings can be detected.
    """
    if not data:
        return None
    text = data.decode(DEFAULT_CHARSET, errors="replace")
    match = _META_CHARSET_RE.search(text)
    if match is None:
        return None
    return match.group(1).lower()


def resolve_charset(content_type: Optional[str], data: bytes) -> str:
    return charset_from_content_type(content_type) or detect_charset(data) or DEFAULT_CHARSET


def decode_body(data: bytes, content_type: Optional[str] = None) -> str:
    """Decode a response body using the resolved charset.

    Raises LookupError when the resolved charset is unknown to Python, and
    UnicodeError for codecs that reject the bytes even with replacement
    (e.g. "idna", "undefined").
    """
    charset = resolve_charset(content_type, data)
    return data.decode(charset, errors="replace")
