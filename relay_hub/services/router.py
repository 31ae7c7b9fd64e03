import logging
from enum import Enum
from typing import Union

from pydantic import BaseModel

from relay_hub.errors import DeliveryError
from relay_hub.models import CommandMessage, CommandResponseMessage, ErrorMessage, Role
from relay_hub.services.broadcaster import Broadcaster
from relay_hub.services.command_queue import FallbackCommandQueue, QueuedCommand
from relay_hub.services.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class RouteOutcome(str, Enum):
    DELIVERED = "delivered"
    QUEUED = "queued"
    REJECTED = "rejected"


class RouteResult(BaseModel):
    outcome: RouteOutcome
    reply: Union[CommandResponseMessage, ErrorMessage]


class CommandRouter:
    """
    Resolves a command's target and either delivers it live, parks it in the
    fallback queue, or rejects it.

    Delivered and queued outcomes are acknowledged to every control app.
    Rejections are only returned to the caller, which decides who hears about it.
    Both the WebSocket and HTTP ingress paths go through route().
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        command_queue: FallbackCommandQueue,
        broadcaster: Broadcaster,
    ):
        self.registry = registry
        self.command_queue = command_queue
        self.broadcaster = broadcaster

    async def route(self, message: CommandMessage) -> RouteResult:
        target = message.target
        role = Role.from_target(target)
        if role is None:
            logger.info(f"Rejected command for unknown target {target!r}")
            return RouteResult(
                outcome=RouteOutcome.REJECTED, reply=ErrorMessage(message=f"Unknown target {target}")
            )

        outbound = message.to_outbound()
        holder = self.registry.current(role)
        if holder is not None:
            try:
                await holder.send(outbound.model_dump_json())
            except DeliveryError as exc:
                logger.warning(f"Live delivery to {role.label} failed: {exc}")
                self.registry.deregister(holder)
            else:
                reply = CommandResponseMessage(
                    success=True,
                    message=f"Command {outbound.command} sent to {target}",
                    target=target,
                )
                await self.broadcaster.broadcast(reply)
                return RouteResult(outcome=RouteOutcome.DELIVERED, reply=reply)

        if not self.command_queue.accepts(role):
            return RouteResult(
                outcome=RouteOutcome.REJECTED, reply=ErrorMessage(message=f"Target {target} not connected")
            )

        depth = self.command_queue.enqueue(QueuedCommand(role=role, payload=outbound))
        logger.info(f"{role.label} offline; queued {outbound.command} ({depth} pending)")
        reply = CommandResponseMessage(
            success=False,
            message=f"Target {target} not connected; command {outbound.command} queued for polling",
            target=target,
        )
        await self.broadcaster.broadcast(reply)
        return RouteResult(outcome=RouteOutcome.QUEUED, reply=reply)
