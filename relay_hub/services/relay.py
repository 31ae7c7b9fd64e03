import base64
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import tornado.ioloop

from relay_hub.config import RelaySettings
from relay_hub.errors import DeliveryError, EnvelopeError, RelayError, UnsupportedMessageError
from relay_hub.models import (
    AlertMessage,
    BinaryStartMessage,
    CommandMessage,
    ErrorMessage,
    ImageMessage,
    PingMessage,
    PongMessage,
    RegisteredMessage,
    RegisterMessage,
    Role,
    StateMessage,
    TelemetryMessage,
    parse_envelope,
)
from relay_hub.services.broadcaster import Broadcaster
from relay_hub.services.command_queue import FallbackCommandQueue
from relay_hub.services.connection import Connection
from relay_hub.services.image_buffer import PendingImageBuffer
from relay_hub.services.liveness import LivenessMonitor
from relay_hub.services.registry import ConnectionRegistry
from relay_hub.services.router import CommandRouter, RouteResult

logger = logging.getLogger(__name__)

FORWARDED_TYPES = (AlertMessage, StateMessage, TelemetryMessage)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class RelayHub:
    """
    The relay's single service object.

    Owns the registry, the fallback queues and the pending image buffer, and is
    handed to every Tornado handler. All methods run on the IOLoop thread.
    """

    def __init__(self, settings: Optional[RelaySettings] = None):
        self.settings = settings or RelaySettings()
        self.registry = ConnectionRegistry()
        self.command_queue = FallbackCommandQueue(self.settings.fallback_roles)
        self.images = PendingImageBuffer(self.settings.image_queue_capacity)
        self.broadcaster = Broadcaster(self.registry)
        self.router = CommandRouter(self.registry, self.command_queue, self.broadcaster)
        self.liveness = LivenessMonitor(
            self.registry, self.settings.heartbeat_interval, on_evict=self.release
        )
        self._image_sweep: Optional[tornado.ioloop.PeriodicCallback] = None

    # Connection lifecycle

    def accept(self, transport: Any) -> Connection:
        connection = Connection(transport)
        self.registry.add(connection)
        return connection

    def release(self, connection: Connection) -> None:
        if connection not in self.registry:
            return
        role = self.registry.deregister(connection)
        if role is Role.CONTROL_APP:
            logger.info(f"{role.label} disconnected ({len(self.registry.lookup(role))} total)")
        else:
            logger.info(f"{role.label} disconnected")

    # Inbound frames

    async def handle_text(self, connection: Connection, raw: str) -> None:
        try:
            envelope = parse_envelope(raw)
        except EnvelopeError as exc:
            logger.warning(f"Dropping message from {connection.id}: {exc}")
            await self._reply(connection, ErrorMessage(message=str(exc)))
            return

        try:
            await self._dispatch(connection, envelope, raw)
        except RelayError as exc:
            logger.warning(f"Rejected {envelope.type} from {connection.id}: {exc}")
            await self._reply(connection, ErrorMessage(message=str(exc)))

    async def handle_binary(self, connection: Connection, data: bytes) -> None:
        if self.registry.role_of(connection.id) is not Role.CAMERA_NODE:
            logger.debug(f"Ignoring {len(data)} binary bytes from {connection.id}")
            return
        image = ImageMessage(data=base64.b64encode(data).decode("ascii"), timestamp=_utc_timestamp())
        await self.broadcaster.broadcast(image)

    async def _dispatch(self, connection: Connection, envelope, raw: str) -> None:
        role = self.registry.role_of(connection.id)
        if isinstance(envelope, RegisterMessage):
            await self._register(connection, envelope)
        elif isinstance(envelope, CommandMessage):
            if role is not Role.CONTROL_APP:
                raise UnsupportedMessageError("Commands may only be sent by android clients")
            result = await self.router.route(envelope)
            if isinstance(result.reply, ErrorMessage):
                await self._reply(connection, result.reply)
        elif isinstance(envelope, FORWARDED_TYPES):
            await self.broadcaster.broadcast(raw)
        elif isinstance(envelope, ImageMessage):
            if role is not Role.CAMERA_NODE:
                raise UnsupportedMessageError("Images may only be sent by esp32cam")
            await self.broadcaster.broadcast(raw)
        elif isinstance(envelope, BinaryStartMessage):
            if role is Role.CAMERA_NODE:
                logger.info(f"Image header received: {envelope.filename}")
        elif isinstance(envelope, PingMessage):
            connection.mark_alive()
            await self._reply(connection, PongMessage())
        elif isinstance(envelope, PongMessage):
            connection.mark_alive()
        else:
            raise UnsupportedMessageError(f"Unexpected message type '{envelope.type}'")

    async def _register(self, connection: Connection, envelope: RegisterMessage) -> None:
        role = envelope.device
        self.registry.register(connection, role)
        connection.mark_alive()
        if role is Role.CONTROL_APP:
            logger.info(f"{role.label} registered ({len(self.registry.lookup(role))} total)")
        else:
            logger.info(f"{role.label} registered")
        await self._reply(
            connection,
            RegisteredMessage(message=f"{role.label} registered", id=connection.id, device=role),
        )

    async def _reply(self, connection: Connection, message) -> None:
        try:
            await connection.send(message.model_dump_json(exclude_none=True))
        except DeliveryError as exc:
            logger.debug(f"Reply dropped: {exc}")

    # HTTP fallback surface

    async def submit_command(self, message: CommandMessage) -> RouteResult:
        return await self.router.route(message)

    def poll(self, role: Role) -> Dict[str, Any]:
        queued = self.command_queue.dequeue(role)
        if queued is None:
            return {}
        logger.info(f"{role.label} polled {queued.payload.command} ({self.command_queue.pending(role)} left)")
        return queued.to_wire()

    def upload_image(self, data: bytes) -> bool:
        accepted = self.images.push(data)
        if not accepted:
            logger.warning(f"Image buffer full ({self.images.capacity}); dropping upload")
        return accepted

    async def flush_image(self) -> bool:
        """Send at most one buffered image, and only if an android client is listening."""
        if not self.registry.lookup(Role.CONTROL_APP):
            return False
        pending = self.images.pop()
        if pending is None:
            return False
        image = ImageMessage(
            data=base64.b64encode(pending.data).decode("ascii"),
            timestamp=pending.received_at.isoformat(),
        )
        delivered = await self.broadcaster.broadcast(image)
        if not delivered:
            self.images.requeue(pending)
            logger.warning(f"No android client took the pending image; {len(self.images)} still buffered")
            return False
        return True

    # Scheduling

    def start(self) -> None:
        self.liveness.start()
        if self._image_sweep is None:
            self._image_sweep = tornado.ioloop.PeriodicCallback(
                self.flush_image, self.settings.image_sweep_interval * 1000
            )
        self._image_sweep.start()

    def stop(self) -> None:
        self.liveness.stop()
        if self._image_sweep is not None:
            self._image_sweep.stop()

    def status(self) -> Dict[str, Any]:
        return {
            "status": "ok",
            "connections": self.registry.counts(),
            "queued": self.command_queue.depths(),
            "pending_images": len(self.images),
        }
