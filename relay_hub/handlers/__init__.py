from .health_handler import HealthHandler, IndexHandler
from .docs_handler import DocsHandler
from .relay_ws_handler import RelayWebSocketHandler
from .command_handler import CommandPollHandler, CommandSubmitHandler, ImageUploadHandler

__all__ = [
    "HealthHandler",
    "IndexHandler",
    "DocsHandler",
    "RelayWebSocketHandler",
    "CommandPollHandler",
    "CommandSubmitHandler",
    "ImageUploadHandler",
]
