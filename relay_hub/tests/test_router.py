import json

import pytest

from relay_hub.config import RelaySettings
from relay_hub.models import CommandMessage, Role
from relay_hub.services import RelayHub, RouteOutcome


def arm_command(target="esp32std"):
    return CommandMessage.model_validate(
        {"type": "command", "target": target, "command": {"command": "arm", "params": {"mode": 1}}}
    )


@pytest.mark.asyncio
async def test_offline_sensor_command_is_queued_and_acknowledged(hub, connect):
    app_a, transport_a = await connect("android")
    app_b, transport_b = await connect("android")

    await hub.handle_text(app_a, arm_command().model_dump_json())

    assert hub.command_queue.pending(Role.SENSOR_NODE) == 1
    assert hub.poll(Role.SENSOR_NODE) == {"type": "command", "command": "arm", "mode": 1}
    for transport in (transport_a, transport_b):
        response = transport.last()
        assert response["type"] == "command_response"
        assert response["success"] is False
        assert response["target"] == "esp32std"


@pytest.mark.asyncio
async def test_live_target_receives_flattened_command(hub, connect):
    _, sensor = await connect("esp32std")
    app, app_transport = await connect("android")
    _, other_app = await connect("android")

    result = await hub.router.route(arm_command())

    assert result.outcome is RouteOutcome.DELIVERED
    assert sensor.messages() == [{"type": "command", "command": "arm", "mode": 1}]
    assert hub.command_queue.pending(Role.SENSOR_NODE) == 0
    for transport in (app_transport, other_app):
        assert transport.last() == {
            "type": "command_response",
            "success": True,
            "message": "Command arm sent to esp32std",
            "target": "esp32std",
        }


@pytest.mark.asyncio
async def test_unknown_target_errors_only_to_originator(hub, connect):
    app, app_transport = await connect("android")
    _, bystander = await connect("android")

    await hub.handle_text(
        app, json.dumps({"type": "command", "target": "tractor", "command": "plough"})
    )

    assert app_transport.messages() == [{"type": "error", "message": "Unknown target tractor"}]
    assert bystander.sent == []
    assert hub.command_queue.depths() == {"esp32std": 0, "esp32cam": 0}


@pytest.mark.asyncio
async def test_failed_live_send_falls_back_to_queue(hub, connect):
    sensor_conn, sensor = await connect("esp32std")
    sensor.fail_sends = True

    result = await hub.router.route(arm_command())

    assert result.outcome is RouteOutcome.QUEUED
    assert hub.registry.current(Role.SENSOR_NODE) is None
    assert hub.command_queue.pending(Role.SENSOR_NODE) == 1


@pytest.mark.asyncio
async def test_offline_target_without_queue_is_rejected():
    hub = RelayHub(RelaySettings(fallback_roles=["esp32std"]))
    result = await hub.router.route(arm_command(target="esp32cam"))

    assert result.outcome is RouteOutcome.REJECTED
    assert result.reply.message == "Target esp32cam not connected"


@pytest.mark.asyncio
async def test_queue_preserves_order_across_ingress_paths(hub, connect):
    app, _ = await connect("android")

    await hub.handle_text(app, json.dumps({"type": "command", "target": "esp32std", "command": "first"}))
    await hub.submit_command(CommandMessage(target="esp32std", command="second"))
    await hub.handle_text(app, json.dumps({"type": "command", "target": "esp32std", "command": "third"}))

    polled = [hub.poll(Role.SENSOR_NODE)["command"] for _ in range(3)]
    assert polled == ["first", "second", "third"]
    assert hub.poll(Role.SENSOR_NODE) == {}


@pytest.mark.asyncio
async def test_commands_from_devices_are_refused(hub, connect):
    sensor_conn, sensor = await connect("esp32std")

    await hub.handle_text(sensor_conn, arm_command(target="esp32cam").model_dump_json())

    assert sensor.last()["type"] == "error"
    assert hub.command_queue.pending(Role.CAMERA_NODE) == 0
