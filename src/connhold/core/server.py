# src/connhold/core/server.py
from __future__ import annotations

import asyncio
import contextlib
from typing import Callable, Optional, Set

from .config import ServerConfig


class HoldingServer:
    """Accepts TCP connections and holds each for ``hold_seconds``.

    The counter is only ever touched from the event loop, so a plain int
    is enough. Connections over ``max_connections`` are closed on accept.
    """

    def __init__(self, config: Optional[ServerConfig] = None,
                 out: Callable[[str], None] = print):
        self.config = config or ServerConfig()
        self.out = out
        self.active_connections = 0
        self.total_accepted = 0
        self.rejected = 0
        self._server: Optional[asyncio.AbstractServer] = None
        self._closing: Optional[asyncio.Event] = None
        self._writers: Set[asyncio.StreamWriter] = set()

    @property
    def port(self) -> int:
        """Bound port; differs from the config when it asked for port 0."""
        if self._server is None or not self._server.sockets:
            return self.config.port
        return self._server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        self._closing = asyncio.Event()
        self._server = await asyncio.start_server(
            self._on_client, self.config.ip, self.config.port)
        self.out(f"Redis server starting... {self.config.ip}:{self.port}")

    async def serve_forever(self) -> None:
        if self._server is None:
            await self.start()
        await self._closing.wait()
        self._server.close()
        for w in list(self._writers):
            w.close()
        await self._server.wait_closed()

    def shutdown(self) -> None:
        self.out(f"Active connections: {self.active_connections}")
        self.out("Ctrl + c detected, shutting down...")
        if self._closing is not None:
            self._closing.set()

    async def _on_client(self, reader: asyncio.StreamReader,
                         writer: asyncio.StreamWriter) -> None:
        peer = writer.get_extra_info("peername")
        addr = f"{peer[0]}:{peer[1]}" if peer else "?"
        if self.active_connections >= self.config.max_connections:
            self.rejected += 1
            writer.close()
            with contextlib.suppress(ConnectionError):
                await writer.wait_closed()
            return

        self.out(addr)
        self.total_accepted += 1
        self.active_connections += 1
        self._writers.add(writer)
        self.out(f"Processing {addr} (active connections: {self.active_connections})")
        try:
            await self._hold(reader)
        finally:
            self._writers.discard(writer)
            self.out(f"Client addr: {addr}")
            self.out(f"Active connections: {self.active_connections}")
            self.active_connections -= 1
            self.out(f"Finished {addr} (active connections: {self.active_connections})")
            writer.close()
            with contextlib.suppress(ConnectionError):
                await writer.wait_closed()

    async def _hold(self, reader: asyncio.StreamReader) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.config.hold_seconds
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                return
            try:
                data = await asyncio.wait_for(reader.read(4096), remaining)
            except asyncio.TimeoutError:
                return
            except ConnectionError:
                return
            # payload is ignored; EOF means the peer went away
            if not data:
                return
