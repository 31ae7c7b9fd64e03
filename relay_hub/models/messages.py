import json
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from relay_hub.errors import EnvelopeError
from relay_hub.models.roles import REGISTRABLE_ROLES, Role

# Keys an outbound command owns; params can never overwrite them.
RESERVED_COMMAND_KEYS = frozenset({"type", "command"})


class RegisterMessage(BaseModel):
    """Inbound identification message; must be the first thing a participant sends."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["register"] = "register"
    device: Role = Field(
        ...,
        validation_alias=AliasChoices("device", "role"),
        description="Declared role: esp32std, esp32cam or android.",
    )

    @field_validator("device")
    @classmethod
    def validate_device(cls, value):
        if value not in REGISTRABLE_ROLES:
            raise ValueError("device must be one of esp32std, esp32cam, android")
        return value


class CommandBody(BaseModel):
    """Nested command form: {"command": {"command": "arm", "params": {...}}}."""

    model_config = ConfigDict(extra="allow")

    command: Optional[str] = Field(default=None, description="Command name.")
    params: Dict[str, Any] = Field(default_factory=dict, description="Command parameters.")


class OutboundCommand(BaseModel):
    """Flattened command as delivered to a device: name plus parameters at top level."""

    model_config = ConfigDict(extra="allow")

    type: Literal["command"] = "command"
    command: str


class CommandMessage(BaseModel):
    """Inbound command from a control app (WebSocket) or from POST /command."""

    type: Literal["command"] = "command"
    target: str = Field(..., description="Target device role, e.g. esp32std.")
    command: Union[str, CommandBody] = Field(
        ..., description="Command name, or a nested object carrying command and params."
    )
    params: Dict[str, Any] = Field(
        default_factory=dict, description="Parameters merged into the outbound command."
    )

    @model_validator(mode="after")
    def require_command_name(self):
        if not self.command_name:
            raise ValueError("command name is missing")
        return self

    @property
    def command_name(self) -> Optional[str]:
        if isinstance(self.command, CommandBody):
            return self.command.command
        return self.command or None

    def resolved_params(self) -> Dict[str, Any]:
        if isinstance(self.command, CommandBody) and "params" in self.command.model_fields_set:
            return self.command.params
        return self.params

    def to_outbound(self) -> OutboundCommand:
        fields = {
            key: value
            for key, value in self.resolved_params().items()
            if key not in RESERVED_COMMAND_KEYS
        }
        return OutboundCommand(command=self.command_name, **fields)


class CommandResponseMessage(BaseModel):
    """Outbound acknowledgement of a delivered or queued command."""

    type: Literal["command_response"] = "command_response"
    success: bool
    message: str
    target: Optional[str] = None


class AlertMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["alert"] = "alert"


class StateMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["state"] = "state"


class TelemetryMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["telemetry"] = "telemetry"


class ImageMessage(BaseModel):
    type: Literal["image"] = "image"
    data: str = Field(..., description="Base64-encoded image payload.")
    timestamp: Optional[str] = Field(default=None, description="ISO8601 capture/receive time.")


class BinaryStartMessage(BaseModel):
    """Header the camera sends ahead of a binary image frame."""

    model_config = ConfigDict(extra="allow")

    type: Literal["binary_start"] = "binary_start"
    filename: Optional[str] = None


class PingMessage(BaseModel):
    type: Literal["ping"] = "ping"


class PongMessage(BaseModel):
    type: Literal["pong"] = "pong"


class RegisteredMessage(BaseModel):
    type: Literal["registered"] = "registered"
    message: str
    id: Optional[str] = Field(default=None, description="Connection identifier assigned by the relay.")
    device: Optional[Role] = None


class ErrorMessage(BaseModel):
    type: Literal["error"] = "error"
    message: str


ENVELOPE_MODELS = (
    RegisterMessage,
    CommandMessage,
    CommandResponseMessage,
    AlertMessage,
    StateMessage,
    TelemetryMessage,
    ImageMessage,
    BinaryStartMessage,
    PingMessage,
    PongMessage,
    RegisteredMessage,
    ErrorMessage,
)

ENVELOPE_TYPES = frozenset(model.model_fields["type"].default for model in ENVELOPE_MODELS)

Envelope = Annotated[
    Union[
        RegisterMessage,
        CommandMessage,
        CommandResponseMessage,
        AlertMessage,
        StateMessage,
        TelemetryMessage,
        ImageMessage,
        BinaryStartMessage,
        PingMessage,
        PongMessage,
        RegisteredMessage,
        ErrorMessage,
    ],
    Field(discriminator="type"),
]

ENVELOPE_ADAPTER = TypeAdapter(Envelope)


def _describe_validation_error(msg_type: str, exc: ValidationError) -> str:
    first = exc.errors()[0]
    # The first loc element is the discriminator tag.
    location = ".".join(str(part) for part in first["loc"][1:])
    detail = f"{location}: {first['msg']}" if location else first["msg"]
    return f"Invalid {msg_type} message: {detail}"


def parse_envelope(raw: Union[str, bytes]):
    """Parse one text frame into a typed envelope, raising EnvelopeError on any failure."""
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise EnvelopeError(f"Invalid JSON: {exc}") from exc
    return validate_envelope(payload)


def validate_envelope(payload: Any):
    if not isinstance(payload, dict):
        raise EnvelopeError("Message must be a JSON object")
    msg_type = payload.get("type")
    if msg_type is None:
        raise EnvelopeError("Message is missing 'type'")
    if not isinstance(msg_type, str) or msg_type not in ENVELOPE_TYPES:
        raise EnvelopeError(f"Unsupported message type '{msg_type}'")
    try:
        return ENVELOPE_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        raise EnvelopeError(_describe_validation_error(msg_type, exc)) from exc


class SchemaDocument(BaseModel):
    """Documentation payload served at /docs for quick reference."""

    websocket_endpoints: Dict[str, str]
    http_endpoints: Dict[str, str]
    inbound_messages: Dict[str, Dict[str, Any]]
    outbound_messages: Dict[str, Dict[str, Any]]
    examples: Dict[str, Any] = Field(default_factory=dict)
    notes: List[str] = []
