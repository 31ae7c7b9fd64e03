from enum import Enum
from typing import Optional


class Role(str, Enum):
    """Participant roles as they appear on the wire."""

    UNIDENTIFIED = "unidentified"
    SENSOR_NODE = "esp32std"
    CAMERA_NODE = "esp32cam"
    CONTROL_APP = "android"

    @property
    def is_single_slot(self) -> bool:
        return self in SINGLE_SLOT_ROLES

    @property
    def label(self) -> str:
        return ROLE_LABELS[self]

    @classmethod
    def from_target(cls, target: str) -> Optional["Role"]:
        """Resolve a command target name; only single-slot roles accept commands."""
        try:
            role = cls(target)
        except ValueError:
            return None
        return role if role.is_single_slot else None


SINGLE_SLOT_ROLES = frozenset({Role.SENSOR_NODE, Role.CAMERA_NODE})
REGISTRABLE_ROLES = frozenset({Role.SENSOR_NODE, Role.CAMERA_NODE, Role.CONTROL_APP})

ROLE_LABELS = {
    Role.UNIDENTIFIED: "Unidentified client",
    Role.SENSOR_NODE: "ESP32-Standard",
    Role.CAMERA_NODE: "ESP32-CAM",
    Role.CONTROL_APP: "Android client",
}
