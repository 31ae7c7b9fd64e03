from typing import Optional, Union

import tornado.websocket

from relay_hub.services.connection import Connection
from relay_hub.services.relay import RelayHub


class RelayWebSocketHandler(tornado.websocket.WebSocketHandler):
    """Single WebSocket endpoint shared by devices and android clients."""

    def initialize(self, hub: RelayHub):
        self.hub = hub
        self.peer: Optional[Connection] = None

    def check_origin(self, origin: str) -> bool:
        # Devices connect without an Origin we could check.
        return True

    def open(self):
        self.peer = self.hub.accept(self)

    async def on_message(self, message: Union[str, bytes]):
        if self.peer is None:
            return
        if isinstance(message, bytes):
            await self.hub.handle_binary(self.peer, message)
        else:
            await self.hub.handle_text(self.peer, message)

    def on_pong(self, data: bytes):
        if self.peer is not None:
            self.peer.mark_alive()

    def on_close(self):
        if self.peer is not None:
            self.peer.closed = True
            self.hub.release(self.peer)
