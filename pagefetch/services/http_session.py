import logging
import threading
import time
from functools import partial

import requests
from requests.adapters import HTTPAdapter
from urllib3 import HTTPConnectionPool, HTTPSConnectionPool, PoolManager
from urllib3.exceptions import EmptyPoolError

from pagefetch.domain.client_config import ClientConfig

logger = logging.getLogger(__name__)


class _AcquireTimeoutMixin:
    """Bound the wait for a free pooled connection.

    urllib3 waits forever on a blocking pool unless `pool_timeout` is passed to
    `urlopen`, which requests never does. When the wait expires urllib3 raises
    `EmptyPoolError`.

    `connection_slots` is shared by every pool of one adapter and caps the
    connections checked out across all hosts. A slot is held from `_get_conn`
    until the matching `_put_conn`.
    """

    def __init__(self, *args, acquire_timeout=None, connection_slots=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.acquire_timeout = acquire_timeout
        self.connection_slots = connection_slots

    def _get_conn(self, timeout=None):
        if timeout is None:
            timeout = self.acquire_timeout
        if self.connection_slots is None:
            return super()._get_conn(timeout=timeout)

        started = time.monotonic()
        if not self.connection_slots.acquire(timeout=timeout):
            raise EmptyPoolError(self, "Connection limit reached for all hosts; no slot freed in time.")
        if timeout is not None:
            timeout = max(0.0, timeout - (time.monotonic() - started))
        try:
            return super()._get_conn(timeout=timeout)
        except BaseException:
            self.connection_slots.release()
            raise

    def _put_conn(self, conn):
        try:
            super()._put_conn(conn)
        finally:
            if self.connection_slots is not None:
                self.connection_slots.release()


class TimedHTTPConnectionPool(_AcquireTimeoutMixin, HTTPConnectionPool):
    pass


class TimedHTTPSConnectionPool(_AcquireTimeoutMixin, HTTPSConnectionPool):
    pass


class PooledHTTPAdapter(HTTPAdapter):
    """HTTPAdapter whose pools block when full and give up after `acquire_timeout`.

    At most `max_total_connections` connections are checked out at once across
    every host the adapter talks to.
    """

    __attrs__ = HTTPAdapter.__attrs__ + ["acquire_timeout", "max_total_connections"]

    def __init__(self, *, acquire_timeout: float, max_total_connections: int, **kwargs):
        # init_poolmanager runs inside HTTPAdapter.__init__
        self.acquire_timeout = acquire_timeout
        self.max_total_connections = max_total_connections
        super().__init__(**kwargs)

    def init_poolmanager(self, connections, maxsize, block=False, **pool_kwargs):
        super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)
        self.connection_slots = threading.Semaphore(self.max_total_connections)
        self._install_pool_classes(self.poolmanager)

    def _install_pool_classes(self, manager: PoolManager) -> None:
        pool_kwargs = {"acquire_timeout": self.acquire_timeout, "connection_slots": self.connection_slots}
        manager.pool_classes_by_scheme = {
            "http": partial(TimedHTTPConnectionPool, **pool_kwargs),
            "https": partial(TimedHTTPSConnectionPool, **pool_kwargs),
        }


def build_adapter(client_config: ClientConfig) -> PooledHTTPAdapter:
    return PooledHTTPAdapter(
        acquire_timeout=client_config.connection_request_timeout,
        max_total_connections=client_config.max_total_connections,
        pool_connections=client_config.max_routes,
        pool_maxsize=client_config.max_connections_per_route,
        pool_block=True,
        max_retries=0,
    )


def build_session(client_config: ClientConfig) -> requests.Session:
    """Create the shared pooled session used for every fetch.

    One adapter serves both schemes so the connection limits apply across them.
    """
    session = requests.Session()
    adapter = build_adapter(client_config)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = client_config.tls_verify
    if session.verify is False:
        logger.warning(
            "TLS certificate verification is disabled; self-signed and untrusted certificates will be accepted"
        )
    logger.info(
        "HTTP pool ready: max_total=%d per_route=%d connect_timeout=%.1fs socket_timeout=%.1fs",
        client_config.max_total_connections,
        client_config.max_connections_per_route,
        client_config.connect_timeout,
        client_config.socket_timeout,
    )
    return session
