"""Transport sessions between the server and a connected device."""

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from fastapi import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Union[None, Awaitable[None]]]

MAX_PENDING_FRAMES = 256


class ModuleSession(ABC):
    """Event-based duplex channel to one device.

    `emit` is synchronous and never blocks; delivery happens in the
    background. Inbound events reach handlers through `dispatch`.
    """

    def __init__(self):
        self.data: Dict[str, Any] = {}
        self._handlers: Dict[str, List[Handler]] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @abstractmethod
    def emit(self, event: str, data: Any = None) -> None:
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close the transport from the server side"""
        pass

    def on(self, event: str, handler: Handler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def remove_all_listeners(self, event: Optional[str] = None) -> None:
        if event is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event, None)

    def listeners(self, event: str) -> List[Handler]:
        return list(self._handlers.get(event, []))

    async def dispatch(self, event: str, data: Any = None) -> bool:
        """Run the handlers registered for an inbound event.

        Returns False when nothing listens for `event`.
        """
        handlers = self.listeners(event)
        for handler in handlers:
            result = handler(data)
            if inspect.isawaitable(result):
                await result
        return bool(handlers)


class WebSocketSession(ModuleSession):
    """Session over a FastAPI websocket carrying `{"event", "data"}` frames.

    Outbound frames go through a queue drained by a writer task so that
    `emit` can be called from synchronous code. A peer that lets more than
    `max_pending` frames pile up is disconnected.
    """

    _CLOSE = object()

    def __init__(self, websocket: WebSocket, max_pending: int = MAX_PENDING_FRAMES):
        super().__init__()
        self.websocket = websocket
        self._outbound: asyncio.Queue = asyncio.Queue(maxsize=max_pending + 1)
        self._max_pending = max_pending
        self._writer: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._writer is None:
            self._writer = asyncio.get_running_loop().create_task(self._write_loop())

    def emit(self, event: str, data: Any = None) -> None:
        if self._closed:
            logger.debug(f"Dropped {event} on closed session")
            return
        if self._outbound.qsize() >= self._max_pending:
            logger.warning(f"Peer is not reading, dropping session after {event}")
            self._drain()
            self.disconnect()
            return
        self._outbound.put_nowait({"event": event, "data": data})

    def disconnect(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._outbound.put_nowait(self._CLOSE)

    def _drain(self) -> None:
        while True:
            try:
                self._outbound.get_nowait()
            except asyncio.QueueEmpty:
                return

    async def stop(self) -> None:
        """Mark closed after the peer went away and wait for the writer"""
        self._closed = True
        if self._writer is not None:
            self._writer.cancel()
            try:
                await self._writer
            except asyncio.CancelledError:
                pass
            self._writer = None

    async def _write_loop(self) -> None:
        while True:
            message = await self._outbound.get()
            try:
                if message is self._CLOSE:
                    await self.websocket.close()
                    return
                await self.websocket.send_json(message)
            except WebSocketDisconnect:
                return
            except RuntimeError as e:
                # Starlette raises RuntimeError once the socket is closed
                logger.debug(f"Websocket send failed: {e}")
                return
