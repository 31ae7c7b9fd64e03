import os
from typing import List, Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from relay_hub.models import Role


class RelaySettings(BaseModel):
    """Runtime settings, read from the environment by from_env()."""

    port: int = Field(default=3000, description="Listen port.")
    address: str = Field(default="0.0.0.0", description="Listen address.")
    heartbeat_interval: float = Field(default=30.0, gt=0, description="Seconds between liveness sweeps.")
    image_sweep_interval: float = Field(default=5.0, gt=0, description="Seconds between pending-image sweeps.")
    image_queue_capacity: int = Field(default=10, ge=1, description="Pending image buffer size.")
    fallback_roles: List[Role] = Field(
        default_factory=lambda: [Role.SENSOR_NODE, Role.CAMERA_NODE],
        description="Device roles that get an HTTP polling queue.",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")

    @field_validator("fallback_roles", mode="before")
    @classmethod
    def split_roles(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("fallback_roles")
    @classmethod
    def validate_fallback_roles(cls, value):
        for role in value:
            if not role.is_single_slot:
                raise ValueError(f"{role.value} cannot have a fallback queue")
        return list(dict.fromkeys(value))

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RelaySettings":
        env = os.environ if environ is None else environ
        keys = {
            "port": "PORT",
            "address": "ADDRESS",
            "heartbeat_interval": "HEARTBEAT_INTERVAL",
            "image_sweep_interval": "IMAGE_SWEEP_INTERVAL",
            "image_queue_capacity": "IMAGE_QUEUE_CAPACITY",
            "fallback_roles": "FALLBACK_ROLES",
            "log_level": "LOG_LEVEL",
        }
        return cls(**{field: env[name] for field, name in keys.items() if env.get(name)})
