class RelayError(Exception):
    """Base class for recoverable relay failures. None of these are process-fatal."""


class EnvelopeError(RelayError):
    """Inbound frame could not be parsed or validated as an envelope."""


class UnsupportedMessageError(RelayError):
    """Well-formed envelope that the sender is not allowed to send."""


class RegistrationError(RelayError):
    pass


class DuplicateRegistrationError(RegistrationError):
    def __init__(self, connection_id: str, role: str):
        super().__init__(f"Connection already registered as {role}")
        self.connection_id = connection_id
        self.role = role


class DeliveryError(RelayError):
    """Send to a peer failed because its transport is closed."""

    def __init__(self, connection_id: str, reason: str = "connection closed"):
        super().__init__(f"Delivery to {connection_id} failed: {reason}")
        self.connection_id = connection_id
