from .connection import Connection
from .registry import ConnectionRegistry
from .command_queue import FallbackCommandQueue, QueuedCommand
from .image_buffer import PendingImage, PendingImageBuffer
from .broadcaster import Broadcaster
from .router import CommandRouter, RouteOutcome, RouteResult
from .liveness import LivenessMonitor
from .relay import RelayHub

__all__ = [
    "Connection",
    "ConnectionRegistry",
    "FallbackCommandQueue",
    "QueuedCommand",
    "PendingImage",
    "PendingImageBuffer",
    "Broadcaster",
    "CommandRouter",
    "RouteOutcome",
    "RouteResult",
    "LivenessMonitor",
    "RelayHub",
]
