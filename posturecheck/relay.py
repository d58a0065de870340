from __future__ import annotations

import json
import logging
import threading
from typing import Any, Callable, Dict, Optional

from websockets.sync.client import connect as ws_connect


logger = logging.getLogger(__name__)

DEFAULT_RELAY_URL = "ws://localhost:3000/ws"
DEFAULT_RECONNECT_DELAY = 3.0

Connector = Callable[..., Any]


class RelayChannel:
    """Persistent websocket to the out-of-process notifier.

    Sending is fire-and-forget: a message sent while disconnected is dropped.
    After any disconnect or failed connect the worker waits
    ``reconnect_delay`` seconds and tries again, until ``stop()``.
    """

    def __init__(
        self,
        url: str = DEFAULT_RELAY_URL,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        connect: Connector = ws_connect,
        connect_timeout: float = 5.0,
    ) -> None:
        self.url = url
        self.reconnect_delay = float(reconnect_delay)
        self._connect = connect
        self._connect_timeout = connect_timeout
        self._conn: Any = None
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def connected(self) -> bool:
        with self._lock:
            return self._conn is not None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="relay-channel", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        self._close_current()
        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None

    def send(self, payload: Dict[str, Any]) -> bool:
        with self._lock:
            conn = self._conn
        if conn is None:
            return False
        try:
            conn.send(json.dumps(payload))
            return True
        except Exception as exc:
            logger.debug("event=relay_send_failed error=%s", exc)
            return False

    def _run(self) -> None:
        while not self._stop.is_set():
            self.connect_once()
            if self._stop.wait(self.reconnect_delay):
                break

    def connect_once(self) -> bool:
        """Connect and block until the connection closes. False if connect failed."""
        try:
            conn = self._connect(self.url, open_timeout=self._connect_timeout)
        except Exception as exc:
            logger.debug("event=relay_connect_failed url=%s error=%s", self.url, exc)
            return False
        with self._lock:
            self._conn = conn
        logger.info("event=relay_connected url=%s", self.url)
        try:
            # Inbound messages are ignored; recv() raises ConnectionClosed on close.
            while not self._stop.is_set():
                conn.recv()
        except Exception as exc:
            logger.debug("event=relay_closed error=%s", exc)
        finally:
            self._close_current()
        logger.info("event=relay_disconnected url=%s", self.url)
        return True

    def _close_current(self) -> None:
        with self._lock:
            conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            conn.close()
        except Exception:
            pass
