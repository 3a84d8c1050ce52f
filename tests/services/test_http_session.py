import logging
import pickle

import pytest
import urllib3

from pagefetch.domain.client_config import ClientConfig
from pagefetch.services.http_session import (
    PooledHTTPAdapter,
    TimedHTTPConnectionPool,
    TimedHTTPSConnectionPool,
    build_adapter,
    build_session,
)


def test_session_mounts_one_pooled_adapter_for_both_schemes():
    session = build_session(ClientConfig())
    http_adapter = session.get_adapter("http://example.com/")
    https_adapter = session.get_adapter("https://example.com/")
    assert isinstance(http_adapter, PooledHTTPAdapter)
    assert http_adapter is https_adapter


def test_adapter_applies_pool_limits():
    adapter = build_adapter(ClientConfig())
    assert adapter._pool_maxsize == 20
    assert adapter._pool_connections == 10
    assert adapter._pool_block is True
    assert adapter.max_retries.total == 0
    assert adapter.acquire_timeout == 10.0
    assert adapter.max_total_connections == 200


def test_pools_use_timed_classes():
    adapter = build_adapter(ClientConfig(connection_request_timeout=2.5))
    http_pool = adapter.poolmanager.connection_from_url("http://example.test/")
    https_pool = adapter.poolmanager.connection_from_url("https://example.test/")
    assert isinstance(http_pool, TimedHTTPConnectionPool)
    assert isinstance(https_pool, TimedHTTPSConnectionPool)
    assert http_pool.acquire_timeout == 2.5
    assert http_pool.block is True
    assert http_pool.pool.maxsize == 20


def test_exhausted_pool_times_out():
    config = ClientConfig(
        max_total_connections=1,
        max_connections_per_route=1,
        connection_request_timeout=0.05,
    )
    pool = build_adapter(config).poolmanager.connection_from_url("http://example.test/")
    held = pool._get_conn()
    try:
        with pytest.raises(urllib3.exceptions.EmptyPoolError):
            pool._get_conn()
    finally:
        pool._put_conn(held)


def test_total_limit_applies_across_hosts():
    config = ClientConfig(
        max_total_connections=2,
        max_connections_per_route=1,
        connection_request_timeout=0.05,
    )
    manager = build_adapter(config).poolmanager

    first_pool = manager.connection_from_url("http://host0.test/")
    first = first_pool._get_conn()
    second_pool = manager.connection_from_url("http://host1.test/")
    second = second_pool._get_conn()

    # more hosts than max_routes: earlier pools are evicted but their connections still count
    third_pool = manager.connection_from_url("http://host2.test/")
    with pytest.raises(urllib3.exceptions.EmptyPoolError):
        third_pool._get_conn()
    fourth_pool = manager.connection_from_url("http://host3.test/")
    with pytest.raises(urllib3.exceptions.EmptyPoolError):
        fourth_pool._get_conn()

    first_pool._put_conn(first)
    third = third_pool._get_conn()
    third_pool._put_conn(third)
    second_pool._put_conn(second)


def test_failed_acquire_does_not_leak_slots():
    config = ClientConfig(
        max_total_connections=2,
        max_connections_per_route=1,
        connection_request_timeout=0.05,
    )
    manager = build_adapter(config).poolmanager
    pool = manager.connection_from_url("http://example.test/")
    held = pool._get_conn()
    # per-route limit reached while a global slot is still free
    with pytest.raises(urllib3.exceptions.EmptyPoolError):
        pool._get_conn()

    other_pool = manager.connection_from_url("http://other.test/")
    other = other_pool._get_conn()
    other_pool._put_conn(other)
    pool._put_conn(held)


def test_verifies_tls_by_default():
    assert build_session(ClientConfig()).verify is True


def test_ca_bundle_used_for_verification():
    session = build_session(ClientConfig(ca_bundle="/etc/ssl/self-signed.pem"))
    assert session.verify == "/etc/ssl/self-signed.pem"


def test_trust_self_signed_disables_verification_and_warns(caplog):
    caplog.set_level(logging.WARNING)
    session = build_session(ClientConfig(trust_self_signed=True))
    assert session.verify is False
    assert any("verification is disabled" in r.getMessage() for r in caplog.records)


def test_adapter_survives_pickling():
    adapter = pickle.loads(pickle.dumps(build_adapter(ClientConfig(connection_request_timeout=3.0))))
    pool = adapter.poolmanager.connection_from_url("http://example.test/")
    assert isinstance(pool, TimedHTTPConnectionPool)
    assert pool.acquire_timeout == 3.0
