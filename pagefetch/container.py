"""Dependency injection container for the application."""
from dependency_injector import containers, providers

from pagefetch import config as env
from pagefetch.domain.client_config import ClientConfig
from pagefetch.services.fetcher import PageFetcher
from pagefetch.services.http_service import HttpService
from pagefetch.services.http_session import build_session
from pagefetch.user_agents import USER_AGENTS


# Environment variables used by the container (read via `pagefetch.config` helpers).
#
# PAGEFETCH_MAX_TOTAL_CONNECTIONS (int, default: 200)
#   Upper bound on pooled connections across all hosts.
#
# PAGEFETCH_MAX_CONNECTIONS_PER_ROUTE (int, default: 20)
#   Pooled connections per host; callers block when all are in use.
#
# PAGEFETCH_SOCKET_TIMEOUT / PAGEFETCH_CONNECT_TIMEOUT (float seconds, default: 10)
#   Read and connect timeouts applied to every request.
#
# PAGEFETCH_CONNECTION_REQUEST_TIMEOUT (float seconds, default: 10)
#   How long a caller waits for a free pooled connection.
#
# PAGEFETCH_VERIFY_TLS (bool, default: true)
# PAGEFETCH_TRUST_SELF_SIGNED (bool, default: false)
#   Setting either to disable verification accepts any certificate. Logged at startup.
#
# PAGEFETCH_CA_BUNDLE (path | optional)
#   PEM bundle used for verification, e.g. to trust one self-signed host.
ENV = {
    "PAGEFETCH_MAX_TOTAL_CONNECTIONS": env.get_int_env("PAGEFETCH_MAX_TOTAL_CONNECTIONS", 200),
    "PAGEFETCH_MAX_CONNECTIONS_PER_ROUTE": env.get_int_env("PAGEFETCH_MAX_CONNECTIONS_PER_ROUTE", 20),
    "PAGEFETCH_SOCKET_TIMEOUT": env.get_float_env("PAGEFETCH_SOCKET_TIMEOUT", 10.0),
    "PAGEFETCH_CONNECT_TIMEOUT": env.get_float_env("PAGEFETCH_CONNECT_TIMEOUT", 10.0),
    "PAGEFETCH_CONNECTION_REQUEST_TIMEOUT": env.get_float_env("PAGEFETCH_CONNECTION_REQUEST_TIMEOUT", 10.0),
    "PAGEFETCH_VERIFY_TLS": env.get_bool_env("PAGEFETCH_VERIFY_TLS", True),
    "PAGEFETCH_TRUST_SELF_SIGNED": env.get_bool_env("PAGEFETCH_TRUST_SELF_SIGNED", False),
    "PAGEFETCH_CA_BUNDLE": env.get_optional_str_env("PAGEFETCH_CA_BUNDLE"),
}


class Container(containers.DeclarativeContainer):
    """Dependency injection container for pagefetch.

    The session and everything built on it are thread-safe singletons, so
    concurrent first use still creates exactly one connection pool.
    """

    # Configuration
    config = providers.Configuration(default=ENV)

    client_config = providers.ThreadSafeSingleton(
        ClientConfig,
        max_total_connections=config.PAGEFETCH_MAX_TOTAL_CONNECTIONS.as_(int),
        max_connections_per_route=config.PAGEFETCH_MAX_CONNECTIONS_PER_ROUTE.as_(int),
        socket_timeout=config.PAGEFETCH_SOCKET_TIMEOUT.as_(float),
        connect_timeout=config.PAGEFETCH_CONNECT_TIMEOUT.as_(float),
        connection_request_timeout=config.PAGEFETCH_CONNECTION_REQUEST_TIMEOUT.as_(float),
        verify_tls=config.PAGEFETCH_VERIFY_TLS,
        trust_self_signed=config.PAGEFETCH_TRUST_SELF_SIGNED,
        ca_bundle=config.PAGEFETCH_CA_BUNDLE,
    )

    # Pooled session - one per container, shared by every fetch
    http_session = providers.ThreadSafeSingleton(
        build_session,
        client_config=client_config,
    )

    http_service = providers.ThreadSafeSingleton(
        HttpService,
        http_client=http_session.provided.get,
        timeout=client_config.provided.request_timeout,
    )

    page_fetcher = providers.ThreadSafeSingleton(
        PageFetcher,
        http_service=http_service,
        user_agents=providers.Object(USER_AGENTS),
        session=http_session,
    )
