import uuid
from typing import Any, Optional, Union

import tornado.iostream
import tornado.websocket

from relay_hub.errors import DeliveryError

_CLOSED_ERRORS = (tornado.websocket.WebSocketClosedError, tornado.iostream.StreamClosedError)


class Connection:
    """
    One live transport session.

    The transport is whatever the WebSocket layer hands us; it must provide
    ``write_message(message, binary=False)`` returning an awaitable, ``ping()``
    and ``close(code, reason)``. Tornado's WebSocketHandler satisfies this as-is.
    The role is not stored here; the registry owns it.
    """

    def __init__(self, transport: Any, connection_id: Optional[str] = None):
        self.id = connection_id or str(uuid.uuid4())
        self.is_alive = True
        self.closed = False
        self._transport = transport

    def __repr__(self) -> str:
        return f"<Connection {self.id}>"

    async def send(self, message: Union[str, bytes]) -> None:
        if self.closed:
            raise DeliveryError(self.id)
        try:
            await self._transport.write_message(message, binary=isinstance(message, bytes))
        except _CLOSED_ERRORS as exc:
            self.closed = True
            raise DeliveryError(self.id) from exc

    def ping(self) -> None:
        if self.closed:
            raise DeliveryError(self.id)
        try:
            self._transport.ping()
        except _CLOSED_ERRORS as exc:
            self.closed = True
            raise DeliveryError(self.id) from exc

    def mark_alive(self) -> None:
        self.is_alive = True

    def terminate(self, reason: str = "heartbeat timeout") -> None:
        if self.closed:
            return
        self.closed = True
        self._transport.close(code=1001, reason=reason)
