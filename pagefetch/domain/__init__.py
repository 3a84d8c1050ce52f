"""Domain objects for pagefetch - explicit re-exports to satisfy linters."""
from .client_config import ClientConfig as ClientConfig
from .http_response import HttpResponse as HttpResponse

__all__ = ["ClientConfig", "HttpResponse"]
