import json
import sys
from pathlib import Path

import pytest
import tornado.websocket

# Ensure repository root is importable for `import relay_hub`
ROOT = Path(__file__).resolve().parent
REPO_ROOT = ROOT.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from relay_hub.config import RelaySettings  # noqa: E402
from relay_hub.services.relay import RelayHub  # noqa: E402


class FakeTransport:
    """Stands in for a Tornado WebSocketHandler."""

    def __init__(self):
        self.sent = []
        self.pings = 0
        self.closed_with = None
        self.fail_sends = False

    async def write_message(self, message, binary=False):
        if self.fail_sends or self.closed_with is not None:
            raise tornado.websocket.WebSocketClosedError()
        self.sent.append(message)

    def ping(self, data=b""):
        if self.closed_with is not None:
            raise tornado.websocket.WebSocketClosedError()
        self.pings += 1

    def close(self, code=None, reason=None):
        self.closed_with = (code, reason)

    def messages(self):
        return [json.loads(raw) for raw in self.sent]

    def last(self):
        return json.loads(self.sent[-1])


@pytest.fixture
def settings():
    return RelaySettings()


@pytest.fixture
def hub(settings):
    return RelayHub(settings)


@pytest.fixture
def connect(hub):
    """Accept a fake connection and optionally register it; returns (connection, transport)."""

    async def _connect(device=None):
        transport = FakeTransport()
        connection = hub.accept(transport)
        if device is not None:
            await hub.handle_text(connection, json.dumps({"type": "register", "device": device}))
            transport.sent.clear()
        return connection, transport

    return _connect
