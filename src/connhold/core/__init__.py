# src/connhold/core/__init__.py
from .config import OpenerConfig, ServerConfig, parse_num_conns
from .opener import ConnectionOpener, ConnState, HeldConnection
from .server import HoldingServer

__all__ = [
    "ConnState",
    "ConnectionOpener",
    "HeldConnection",
    "HoldingServer",
    "OpenerConfig",
    "ServerConfig",
    "parse_num_conns",
]
