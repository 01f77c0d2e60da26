# src/connhold/core/opener.py
from __future__ import annotations

import enum
import socket
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .config import OpenerConfig, parse_num_conns

# how often a holding thread wakes up to check for stop()
POLL_INTERVAL = 0.2


class ConnState(enum.Enum):
    ATTEMPTING = "attempting"
    OPEN = "open"
    CLOSED = "closed"


@dataclass
class HeldConnection:
    index: int
    state: ConnState = ConnState.ATTEMPTING
    error: Optional[BaseException] = None
    thread: Optional[threading.Thread] = field(default=None, repr=False)
    sock: Optional[socket.socket] = field(default=None, repr=False)
    opened_at: Optional[float] = None
    closed_at: Optional[float] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def held_for(self) -> float:
        """Seconds the socket stayed open; 0 if it never opened."""
        if self.opened_at is None:
            return 0.0
        end = self.closed_at if self.closed_at is not None else time.monotonic()
        return end - self.opened_at


class ConnectionOpener:
    """Opens N TCP connections at once and keeps them open.

    Every connection gets its own daemon thread. The thread connects,
    then sits on the very socket it opened until the peer hangs up or
    stop() is called, so waiting on the threads is waiting on the
    connections.

    Failures (refused, timeout, DNS) are never printed. They end up on
    ``HeldConnection.error`` instead.
    """

    def __init__(self, config: Optional[OpenerConfig] = None,
                 out: Callable[[str], None] = print):
        self.config = config or OpenerConfig()
        self.out = out
        self.conns: List[HeldConnection] = []
        self._stop = threading.Event()
        self._lock = threading.Lock()

    # --- launch / join ---

    def open_all(self, num_conns=None) -> List[HeldConnection]:
        n = parse_num_conns(self.config.num_conns if num_conns is None else num_conns)
        # a new batch replaces the previous one, including after stop()
        self._stop.clear()
        self.conns = []
        for i in range(1, n + 1):
            conn = HeldConnection(index=i)
            t = threading.Thread(target=self._hold, args=(conn,),
                                 name=f"conn-{i}", daemon=True)
            conn.thread = t
            self.conns.append(conn)
            t.start()
            self.out(f"Started connection {i} (thread: {t.name})")
        self.out(f"Successfully initiated {n} connections.")
        return self.conns

    def wait(self, timeout: Optional[float] = None) -> bool:
        deadline = None if timeout is None else time.monotonic() + timeout
        for conn in self.conns:
            if conn.thread is None:
                continue
            if deadline is None:
                # join() with a timeout keeps Ctrl+C deliverable on the main thread
                while conn.thread.is_alive():
                    conn.thread.join(POLL_INTERVAL)
            else:
                conn.thread.join(max(deadline - time.monotonic(), 0))
        return not any(c.thread is not None and c.thread.is_alive() for c in self.conns)

    def run(self, num_conns=None) -> List[HeldConnection]:
        self.open_all(num_conns)
        try:
            self.wait()
        except KeyboardInterrupt:
            self.stop()
            self.wait()
        return self.conns

    def stop(self) -> None:
        self._stop.set()
        with self._lock:
            for conn in self.conns:
                if conn.sock is not None:
                    try:
                        conn.sock.shutdown(socket.SHUT_RDWR)
                    except OSError:
                        # already gone on the other side
                        pass

    def summary(self) -> Dict[str, int]:
        counts = {state.value: 0 for state in ConnState}
        failed = 0
        for conn in self.conns:
            counts[conn.state.value] += 1
            if conn.failed:
                failed += 1
        counts["failed"] = failed
        return counts

    # --- per-connection unit ---

    def _hold(self, conn: HeldConnection) -> None:
        cfg = self.config
        try:
            s = socket.create_connection((cfg.host, cfg.port), timeout=cfg.connect_timeout)
        except OSError as e:
            conn.error = e
            conn.state = ConnState.CLOSED
            return

        with self._lock:
            conn.sock = s
            conn.state = ConnState.OPEN
            conn.opened_at = time.monotonic()
        try:
            s.settimeout(POLL_INTERVAL)
            while not self._stop.is_set():
                try:
                    data = s.recv(4096)
                except socket.timeout:
                    continue
                except OSError as e:
                    if not self._stop.is_set():
                        conn.error = e
                    break
                if not data:
                    break
        finally:
            with self._lock:
                conn.sock = None
                conn.state = ConnState.CLOSED
                conn.closed_at = time.monotonic()
            s.close()
