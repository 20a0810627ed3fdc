# companion/transport.py
"""
Transport WebSocket vers le backend IA : connexion persistante, reconnexion
avec backoff exponentiel, ping websockets.
Le routeur ne voit que is_connected() / send() et les signaux on_message,
on_connected_changed, on_error (appelés sur la boucle asyncio, jamais en thread).
"""

from __future__ import annotations
import asyncio
import logging
from typing import Optional, Set

import websockets
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI

from companion import config
from companion.signals import Signal

logger = logging.getLogger(__name__)


class WebSocketTransport:
    def __init__(
        self,
        url: str = config.WEBSOCKET_URL,
        reconnect_delay: float = config.RECONNECT_DELAY_SEC,
        max_reconnect_delay: float = config.MAX_RECONNECT_DELAY_SEC,
        ping_interval: Optional[float] = config.PING_INTERVAL_SEC,
    ) -> None:
        self.url = url
        self.reconnect_delay = reconnect_delay
        self.max_reconnect_delay = max_reconnect_delay
        self.ping_interval = ping_interval

        self._ws = None
        self._connected = False
        self._running = False
        self._send_tasks: Set[asyncio.Task] = set()

        self.on_message = Signal("ws_message")
        self.on_connected_changed = Signal("ws_connected_changed")
        self.on_error = Signal("ws_error")

    def is_connected(self) -> bool:
        return self._connected and self._ws is not None

    def send(self, text: str) -> None:
        """Écriture planifiée sur la boucle courante. Non connecté -> log, ignoré."""
        if not self.is_connected():
            logger.warning("websocket send dropped: not connected")
            return
        task = asyncio.get_running_loop().create_task(self._send(text))
        self._send_tasks.add(task)
        task.add_done_callback(self._send_tasks.discard)

    async def _send(self, text: str) -> None:
        ws = self._ws
        if ws is None:
            logger.warning("websocket send dropped: connection gone")
            return
        try:
            await ws.send(text)
        except ConnectionClosed as e:
            logger.warning("websocket send failed: connection closed (%s)", e)

    async def run(self) -> None:
        """Boucle connexion / reconnexion jusqu'à close()."""
        self._running = True
        delay = self.reconnect_delay

        while self._running:
            try:
                await self._connect_once()
                delay = self.reconnect_delay
            except InvalidURI as e:
                # Erreur de config : inutile de réessayer
                logger.error("invalid websocket url: %s", e)
                self.on_error.emit(f"Invalid backend URL: {e}")
                self._running = False
                break
            except InvalidHandshake as e:
                logger.error("websocket handshake failed: %s", e)
                self.on_error.emit(f"Handshake failed: {e}")
            except OSError as e:
                logger.error("websocket network error: %s", e)
                self.on_error.emit(f"Network error: {e}")
            except asyncio.CancelledError:
                self._running = False
                raise
            except Exception as e:
                logger.exception("websocket connection error: %s", e)
                self.on_error.emit(f"{type(e).__name__}: {e}")

            if not self._running:
                break
            logger.warning("reconnecting in %.1fs", delay)
            await asyncio.sleep(delay)
            delay = min(delay * 2, self.max_reconnect_delay)

    async def _connect_once(self) -> None:
        logger.info("connecting to %s", self.url)
        self._ws = await websockets.connect(
            self.url,
            ping_interval=self.ping_interval,
            ping_timeout=10,
        )
        self._set_connected(True)
        try:
            async for message in self._ws:
                if isinstance(message, bytes):
                    message = message.decode("utf-8", errors="replace")
                self.on_message.emit(message)
        except ConnectionClosed as e:
            logger.warning("websocket closed: %s", e)
        finally:
            self._ws = None
            self._set_connected(False)

    def _set_connected(self, connected: bool) -> None:
        if self._connected == connected:
            return
        self._connected = connected
        self.on_connected_changed.emit(connected)

    async def close(self) -> None:
        self._running = False
        ws = self._ws
        if ws is not None:
            await ws.close()
        for task in list(self._send_tasks):
            task.cancel()
