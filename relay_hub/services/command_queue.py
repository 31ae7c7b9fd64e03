from collections import deque
from datetime import datetime, timezone
from typing import Deque, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from relay_hub.models import OutboundCommand, Role


class QueuedCommand(BaseModel):
    """A command waiting for its device to poll. Never expires."""

    role: Role
    payload: OutboundCommand
    queued_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_wire(self):
        return self.payload.model_dump()


class FallbackCommandQueue:
    """Per-role FIFO of commands for devices that fall back to HTTP polling."""

    def __init__(self, roles: Iterable[Role]):
        self._queues: Dict[Role, Deque[QueuedCommand]] = {role: deque() for role in roles}

    def accepts(self, role: Role) -> bool:
        return role in self._queues

    def enqueue(self, command: QueuedCommand) -> int:
        """Append to the role's queue and return its new depth."""
        if command.role not in self._queues:
            raise KeyError(f"No fallback queue for {command.role.value}")
        queue = self._queues[command.role]
        queue.append(command)
        return len(queue)

    def dequeue(self, role: Role) -> Optional[QueuedCommand]:
        queue = self._queues.get(role)
        if not queue:
            return None
        return queue.popleft()

    def pending(self, role: Role) -> int:
        return len(self._queues.get(role, ()))

    def snapshot(self, role: Role) -> List[QueuedCommand]:
        return list(self._queues.get(role, ()))

    def depths(self) -> Dict[str, int]:
        return {role.value: len(queue) for role, queue in self._queues.items()}
