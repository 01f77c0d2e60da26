# src/connhold/core/config.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

DEFAULT_PORT = 6379


@dataclass
class OpenerConfig:
    host: str = "localhost"
    port: int = DEFAULT_PORT
    num_conns: int = 1
    # None means block in connect() until the OS gives up
    connect_timeout: Optional[float] = None


@dataclass
class ServerConfig:
    """Listener settings; defaults keep a "reasonable" cap on connections."""

    ip: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    max_connections: int = 100
    hold_seconds: float = 5.0

    @property
    def address(self) -> str:
        return f"{self.ip}:{self.port}"


def parse_num_conns(raw: Union[str, int, None]) -> int:
    """Turn the NUM_CONNS argument into a connection count.

    Missing, empty or non-numeric input falls back to 1. Negative counts
    give 0: the 1..N launch loop never runs.
    """
    if raw is None:
        return 1
    if isinstance(raw, int):
        return max(raw, 0)
    raw = raw.strip()
    if not raw:
        return 1
    try:
        n = int(raw)
    except ValueError:
        return 1
    return max(n, 0)
