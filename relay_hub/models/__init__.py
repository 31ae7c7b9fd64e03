"""Pydantic models for relay envelopes and participant roles."""

from .roles import REGISTRABLE_ROLES, SINGLE_SLOT_ROLES, Role
from .messages import (
    AlertMessage,
    BinaryStartMessage,
    CommandBody,
    CommandMessage,
    CommandResponseMessage,
    ENVELOPE_TYPES,
    ErrorMessage,
    ImageMessage,
    OutboundCommand,
    PingMessage,
    PongMessage,
    RegisteredMessage,
    RegisterMessage,
    SchemaDocument,
    StateMessage,
    TelemetryMessage,
    parse_envelope,
    validate_envelope,
)

__all__ = [
    "Role",
    "REGISTRABLE_ROLES",
    "SINGLE_SLOT_ROLES",
    "AlertMessage",
    "BinaryStartMessage",
    "CommandBody",
    "CommandMessage",
    "CommandResponseMessage",
    "ENVELOPE_TYPES",
    "ErrorMessage",
    "ImageMessage",
    "OutboundCommand",
    "PingMessage",
    "PongMessage",
    "RegisteredMessage",
    "RegisterMessage",
    "SchemaDocument",
    "StateMessage",
    "TelemetryMessage",
    "parse_envelope",
    "validate_envelope",
]
