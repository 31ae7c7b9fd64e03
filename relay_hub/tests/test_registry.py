import pytest

from relay_hub.errors import DuplicateRegistrationError
from relay_hub.models import Role
from relay_hub.services import Connection, ConnectionRegistry


def make_connection(name):
    return Connection(transport=None, connection_id=name)


def test_single_slot_holds_most_recent_registration():
    registry = ConnectionRegistry()
    first, second, third = (make_connection(n) for n in ("a", "b", "c"))

    for conn in (first, second, third):
        registry.add(conn)
        registry.register(conn, Role.SENSOR_NODE)
        assert registry.lookup(Role.SENSOR_NODE) == [conn]

    assert registry.current(Role.SENSOR_NODE) is third
    # Displaced connections stay open until their transport closes.
    assert first in registry
    assert registry.role_of("a") is Role.SENSOR_NODE


def test_stale_close_does_not_clear_newer_holder():
    registry = ConnectionRegistry()
    old, new = make_connection("old"), make_connection("new")
    registry.register(old, Role.CAMERA_NODE)
    registry.register(new, Role.CAMERA_NODE)

    registry.deregister(old)

    assert registry.current(Role.CAMERA_NODE) is new
    registry.deregister(new)
    assert registry.lookup(Role.CAMERA_NODE) == []


def test_control_apps_form_a_set():
    registry = ConnectionRegistry()
    apps = [make_connection(f"app-{i}") for i in range(3)]
    for app in apps:
        registry.register(app, Role.CONTROL_APP)

    assert set(c.id for c in registry.lookup(Role.CONTROL_APP)) == {"app-0", "app-1", "app-2"}

    registry.deregister(apps[1])
    assert [c.id for c in registry.lookup(Role.CONTROL_APP)] == ["app-0", "app-2"]


def test_second_registration_is_rejected_and_role_kept():
    registry = ConnectionRegistry()
    conn = make_connection("x")
    registry.register(conn, Role.CONTROL_APP)

    with pytest.raises(DuplicateRegistrationError):
        registry.register(conn, Role.SENSOR_NODE)

    assert registry.role_of("x") is Role.CONTROL_APP
    assert registry.current(Role.SENSOR_NODE) is None


def test_unregistered_connections_and_counts():
    registry = ConnectionRegistry()
    idle = make_connection("idle")
    sensor = make_connection("sensor")
    registry.add(idle)
    registry.add(sensor)
    registry.register(sensor, Role.SENSOR_NODE)

    assert registry.role_of("idle") is Role.UNIDENTIFIED
    assert registry.lookup(Role.UNIDENTIFIED) == [idle]
    assert registry.counts() == {"esp32std": 1, "esp32cam": 0, "android": 0, "unidentified": 1}

    assert registry.deregister(idle) is Role.UNIDENTIFIED
    assert registry.deregister(idle) is Role.UNIDENTIFIED
    assert len(registry) == 1
