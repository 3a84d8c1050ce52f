from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class ClientConfig:
    """Tuning values for the pooled HTTP client.

    Timeouts are in seconds. `connection_request_timeout` bounds how long a
    caller waits for a free connection when every per-route slot is busy.

    TLS verification is on by default. `trust_self_signed` turns it off for
    the whole client and is meant for known hosts serving self-signed
    certificates; prefer `ca_bundle` pointing at that certificate, which keeps
    verification enabled.
    """

    max_total_connections: int = 200
    max_connections_per_route: int = 20
    socket_timeout: float = 10.0
    connect_timeout: float = 10.0
    connection_request_timeout: float = 10.0
    verify_tls: bool = True
    trust_self_signed: bool = False
    ca_bundle: Optional[str] = None

    def __post_init__(self):
        if self.max_total_connections <= 0:
            raise ValueError("max_total_connections must be positive")
        if self.max_connections_per_route <= 0:
            raise ValueError("max_connections_per_route must be positive")
        if self.max_connections_per_route > self.max_total_connections:
            raise ValueError("max_connections_per_route cannot exceed max_total_connections")
        for name in ("socket_timeout", "connect_timeout", "connection_request_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    @property
    def max_routes(self) -> int:
        """Number of per-host pools kept alive at once."""
        return max(1, self.max_total_connections // self.max_connections_per_route)

    @property
    def request_timeout(self) -> Tuple[float, float]:
        return (self.connect_timeout, self.socket_timeout)

    @property
    def tls_verify(self) -> Union[bool, str]:
        """Value for `requests.Session.verify`."""
        if self.ca_bundle:
            return self.ca_bundle
        if self.trust_self_signed or not self.verify_tls:
            return False
        return True
