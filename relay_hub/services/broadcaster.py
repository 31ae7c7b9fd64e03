import logging
from typing import Union

from pydantic import BaseModel

from relay_hub.errors import DeliveryError
from relay_hub.models import Role
from relay_hub.services.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class Broadcaster:
    """Best-effort fan-out to every live android connection."""

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    async def broadcast(self, message: Union[BaseModel, str]) -> int:
        """Send to all control apps and return how many deliveries succeeded."""
        if isinstance(message, BaseModel):
            message = message.model_dump_json(exclude_none=True)
        delivered = 0
        for client in self.registry.lookup(Role.CONTROL_APP):
            try:
                await client.send(message)
                delivered += 1
            except DeliveryError as exc:
                logger.warning(f"Fan-out skipped {client.id}: {exc}")
                self.registry.deregister(client)
        return delivered
