import json
from http import HTTPStatus

import tornado.web

from relay_hub.errors import EnvelopeError
from relay_hub.models import CommandMessage, ErrorMessage, Role, validate_envelope
from relay_hub.services.relay import RelayHub
from relay_hub.services.router import RouteOutcome

OUTCOME_STATUS = {
    RouteOutcome.DELIVERED: HTTPStatus.OK,
    RouteOutcome.QUEUED: HTTPStatus.ACCEPTED,
    RouteOutcome.REJECTED: HTTPStatus.BAD_REQUEST,
}


class JSONHandler(tornado.web.RequestHandler):
    def initialize(self, hub: RelayHub):
        self.hub = hub

    def write_json(self, status: int, body) -> None:
        self.set_status(status)
        self.set_header("Content-Type", "application/json")
        if hasattr(body, "model_dump_json"):
            body = body.model_dump_json(exclude_none=True)
        else:
            body = json.dumps(body)
        self.finish(body)

    def write_error_message(self, status: int, message: str) -> None:
        self.write_json(status, ErrorMessage(message=message))


class CommandSubmitHandler(JSONHandler):
    """POST /command: the HTTP twin of a WebSocket command from an android client."""

    async def post(self):
        try:
            payload = json.loads(self.request.body or b"")
            envelope = validate_envelope(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            self.write_error_message(HTTPStatus.BAD_REQUEST, f"Invalid JSON: {exc}")
            return
        except EnvelopeError as exc:
            self.write_error_message(HTTPStatus.BAD_REQUEST, str(exc))
            return
        if not isinstance(envelope, CommandMessage):
            self.write_error_message(HTTPStatus.BAD_REQUEST, "Expected a message of type 'command'")
            return

        result = await self.hub.submit_command(envelope)
        self.write_json(OUTCOME_STATUS[result.outcome], result.reply)


class CommandPollHandler(JSONHandler):
    """GET /device/<role>/commands: oldest queued command, or {} when there is none."""

    def get(self, device: str):
        role = Role.from_target(device)
        if role is None or not self.hub.command_queue.accepts(role):
            self.write_error_message(HTTPStatus.NOT_FOUND, f"No command queue for {device}")
            return
        self.write_json(HTTPStatus.OK, self.hub.poll(role))


class ImageUploadHandler(JSONHandler):
    """POST /upload: raw image bytes from a camera without a WebSocket."""

    def post(self):
        data = self.request.body
        if not data:
            self.write_json(HTTPStatus.BAD_REQUEST, {"success": False, "message": "Empty image"})
            return
        if self.hub.upload_image(data):
            self.write_json(HTTPStatus.OK, {"success": True})
        else:
            self.write_json(HTTPStatus.SERVICE_UNAVAILABLE, {"success": False, "message": "Image buffer full"})
