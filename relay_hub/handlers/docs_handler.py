import tornado.web

from relay_hub.models import (
    AlertMessage,
    CommandMessage,
    CommandResponseMessage,
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
)


class DocsHandler(tornado.web.RequestHandler):
    def get(self):
        command_nested_example = {
            "type": "command",
            "target": "esp32std",
            "command": {"command": "arm", "params": {"mode": 1}},
        }
        command_flat_example = {
            "type": "command",
            "target": "esp32std",
            "command": "wifi",
            "params": {"ssid": "farm-net", "pass": "secret"},
        }

        schema = SchemaDocument(
            websocket_endpoints={"relay": "/ws"},
            http_endpoints={
                "POST /command": "Submit a command; 200 delivered, 202 queued, 400 rejected.",
                "GET /device/<role>/commands": "Poll the oldest queued command; {} when none.",
                "POST /upload": "Raw image bytes; relayed to android clients every sweep.",
                "GET /health": "Connection counts and queue depths.",
            },
            inbound_messages={
                "RegisterMessage": RegisterMessage.model_json_schema(),
                "CommandMessage": CommandMessage.model_json_schema(),
                "AlertMessage": AlertMessage.model_json_schema(),
                "StateMessage": StateMessage.model_json_schema(),
                "TelemetryMessage": TelemetryMessage.model_json_schema(),
                "ImageMessage": ImageMessage.model_json_schema(),
                "PingMessage": PingMessage.model_json_schema(),
                "PongMessage": PongMessage.model_json_schema(),
            },
            outbound_messages={
                "RegisteredMessage": RegisteredMessage.model_json_schema(),
                "OutboundCommand": OutboundCommand.model_json_schema(),
                "CommandResponseMessage": CommandResponseMessage.model_json_schema(),
                "ImageMessage": ImageMessage.model_json_schema(),
                "ErrorMessage": ErrorMessage.model_json_schema(),
            },
            examples={
                "register": {"type": "register", "device": "android"},
                "command_nested": command_nested_example,
                "command_flat": command_flat_example,
                "delivered_to_device": {"type": "command", "command": "arm", "mode": 1},
            },
            notes=[
                "Text frames are JSON objects with a 'type' field; send 'register' first.",
                "Binary frames from esp32cam are relayed to android clients as base64 'image' messages.",
                "Commands for an offline device are queued and served by its /device/<role>/commands poll.",
                "alert, state and telemetry messages are forwarded unchanged to every android client.",
            ],
        )
        self.set_header("Content-Type", "application/json")
        self.write(schema.model_dump(mode="json"))
