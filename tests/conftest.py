# tests/conftest.py
import asyncio
import socket
import threading

import pytest

from connhold.core import HoldingServer, ServerConfig


def pick_free_port() -> int:
    s = socket.socket()
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


@pytest.fixture
def free_port():
    return pick_free_port()


class ServerThread:
    """HoldingServer on its own event loop in a background thread."""

    def __init__(self, **cfg):
        self.lines = []
        self.server = HoldingServer(ServerConfig(ip="127.0.0.1", port=0, **cfg),
                                    out=self.lines.append)
        self.loop = None
        self._ready = threading.Event()
        self._th = threading.Thread(target=self._run, daemon=True)

    def _run(self):
        async def main():
            self.loop = asyncio.get_running_loop()
            await self.server.start()
            self._ready.set()
            await self.server.serve_forever()
        asyncio.run(main())

    def start(self):
        self._th.start()
        assert self._ready.wait(2.0), "server did not start in time"
        return self

    def stop(self):
        self.loop.call_soon_threadsafe(self.server.shutdown)
        self._th.join(timeout=2.0)
        assert not self._th.is_alive(), "server thread did not stop in time"


@pytest.fixture
def holding_server():
    started = []

    def make(**cfg):
        st = ServerThread(**cfg).start()
        started.append(st)
        return st

    yield make
    for st in started:
        st.stop()
