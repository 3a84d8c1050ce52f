import threading

from pagefetch.container import Container
from pagefetch.services.fetcher import PageFetcher
from pagefetch.services.http_session import PooledHTTPAdapter


def test_container_creates_fetcher():
    container = Container()
    fetcher = container.page_fetcher()
    assert isinstance(fetcher, PageFetcher)
    assert fetcher.http_service is container.http_service()
    assert fetcher.http_service.timeout == (10.0, 10.0)


def test_container_applies_configuration():
    container = Container()
    container.config.PAGEFETCH_MAX_TOTAL_CONNECTIONS.from_value(50)
    container.config.PAGEFETCH_MAX_CONNECTIONS_PER_ROUTE.from_value(5)
    container.config.PAGEFETCH_CONNECT_TIMEOUT.from_value(2)
    container.config.PAGEFETCH_CA_BUNDLE.from_value("/tmp/ca.pem")

    client_config = container.client_config()
    assert client_config.max_total_connections == 50
    assert client_config.max_connections_per_route == 5
    assert client_config.connect_timeout == 2.0

    session = container.http_session()
    adapter = session.get_adapter("http://example.com/")
    assert isinstance(adapter, PooledHTTPAdapter)
    assert adapter._pool_maxsize == 5
    assert adapter._pool_connections == 10
    assert session.verify == "/tmp/ca.pem"


def test_concurrent_first_use_builds_one_pool():
    container = Container()
    barrier = threading.Barrier(16)
    sessions = []
    fetchers = []
    lock = threading.Lock()

    def worker():
        barrier.wait()
        fetcher = container.page_fetcher()
        session = container.http_session()
        with lock:
            fetchers.append(fetcher)
            sessions.append(session)

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(sessions) == 16
    assert len({id(s) for s in sessions}) == 1
    assert len({id(f) for f in fetchers}) == 1
