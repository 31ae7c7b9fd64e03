import logging
from typing import Dict, List, Optional

from relay_hub.errors import DuplicateRegistrationError, RegistrationError
from relay_hub.models import REGISTRABLE_ROLES, SINGLE_SLOT_ROLES, Role
from relay_hub.services.connection import Connection

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """
    Tracks every open connection and which of them hold a role.

    esp32std and esp32cam are single-slot: the latest registration wins and the
    displaced connection is left to close on its own. android connections form
    a set keyed by connection id.
    """

    def __init__(self):
        self._connections: Dict[str, Connection] = {}
        self._roles: Dict[str, Role] = {}
        self._slots: Dict[Role, Optional[Connection]] = {role: None for role in SINGLE_SLOT_ROLES}
        self._control_apps: Dict[str, Connection] = {}

    def add(self, connection: Connection) -> None:
        self._connections[connection.id] = connection

    def register(self, connection: Connection, role: Role) -> None:
        if role not in REGISTRABLE_ROLES:
            raise RegistrationError(f"Role {role.value} cannot be registered")
        existing = self._roles.get(connection.id)
        if existing is not None:
            raise DuplicateRegistrationError(connection.id, existing.value)

        self._connections[connection.id] = connection
        self._roles[connection.id] = role
        if role.is_single_slot:
            previous = self._slots[role]
            if previous is not None and previous is not connection:
                logger.info(f"{role.label} {previous.id} replaced by {connection.id}")
            self._slots[role] = connection
        else:
            self._control_apps[connection.id] = connection

    def deregister(self, connection: Connection) -> Role:
        """Forget a closed connection. Safe to call more than once."""
        self._connections.pop(connection.id, None)
        role = self._roles.pop(connection.id, Role.UNIDENTIFIED)
        if role.is_single_slot:
            # A stale close must not clear a newer holder of the same slot.
            if self._slots[role] is connection:
                self._slots[role] = None
        elif role is Role.CONTROL_APP:
            self._control_apps.pop(connection.id, None)
        return role

    def role_of(self, connection_id: str) -> Role:
        return self._roles.get(connection_id, Role.UNIDENTIFIED)

    def current(self, role: Role) -> Optional[Connection]:
        return self._slots.get(role)

    def lookup(self, role: Role) -> List[Connection]:
        if role.is_single_slot:
            holder = self._slots[role]
            return [holder] if holder is not None else []
        if role is Role.CONTROL_APP:
            return list(self._control_apps.values())
        return [
            conn for conn_id, conn in self._connections.items() if conn_id not in self._roles
        ]

    def connections(self) -> List[Connection]:
        return list(self._connections.values())

    def counts(self) -> Dict[str, int]:
        return {
            Role.SENSOR_NODE.value: len(self.lookup(Role.SENSOR_NODE)),
            Role.CAMERA_NODE.value: len(self.lookup(Role.CAMERA_NODE)),
            Role.CONTROL_APP.value: len(self._control_apps),
            Role.UNIDENTIFIED.value: len(self.lookup(Role.UNIDENTIFIED)),
        }

    def __contains__(self, connection: Connection) -> bool:
        return connection.id in self._connections

    def __len__(self) -> int:
        return len(self._connections)
