# src/connhold/cli.py
"""Command-line entry points.

    connhold-open 3                 # three connections to localhost:6379
    connhold-server --hold-seconds 30
"""
from __future__ import annotations

import argparse
import asyncio
import signal

from .core import ConnectionOpener, HoldingServer, OpenerConfig, ServerConfig, parse_num_conns


def open_main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="connhold-open",
        description="Open NUM_CONNS TCP connections and hold them until interrupted")
    # kept as a raw string so that junk falls back to 1 instead of erroring
    parser.add_argument("num_conns", nargs="?", default=None, metavar="NUM_CONNS",
                        help="number of connections (default 1)")
    parser.add_argument("--host", default="localhost", help="target host")
    parser.add_argument("--port", type=int, default=6379, help="target port")
    parser.add_argument("--timeout", type=float, default=None,
                        help="connect timeout in seconds")
    args = parser.parse_args(argv)

    cfg = OpenerConfig(host=args.host, port=args.port,
                       num_conns=parse_num_conns(args.num_conns),
                       connect_timeout=args.timeout)
    ConnectionOpener(cfg).run()
    return 0


async def _serve(server: HoldingServer) -> None:
    await server.start()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, server.shutdown)
    except NotImplementedError:
        # Windows event loops: Ctrl+C arrives as KeyboardInterrupt instead
        pass
    await server.serve_forever()


def server_main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="connhold-server",
                                     description="TCP server that holds connections open")
    parser.add_argument("--ip", default="127.0.0.1", help="bind address")
    parser.add_argument("--port", type=int, default=6379, help="listen port")
    parser.add_argument("--max-connections", type=int, default=100,
                        help="connections over this are closed on accept")
    parser.add_argument("--hold-seconds", type=float, default=5.0,
                        help="how long each connection is held")
    args = parser.parse_args(argv)

    server = HoldingServer(ServerConfig(ip=args.ip, port=args.port,
                                        max_connections=args.max_connections,
                                        hold_seconds=args.hold_seconds))
    try:
        asyncio.run(_serve(server))
    except KeyboardInterrupt:
        server.shutdown()
    return 0


if __name__ == "__main__":
    raise SystemExit(open_main())
