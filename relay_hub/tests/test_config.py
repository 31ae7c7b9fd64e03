import pydantic
import pytest

from relay_hub.config import RelaySettings
from relay_hub.models import Role


def test_defaults_match_device_firmware():
    settings = RelaySettings.from_env({})

    assert settings.port == 3000
    assert settings.heartbeat_interval == 30.0
    assert settings.image_sweep_interval == 5.0
    assert settings.image_queue_capacity == 10
    assert settings.fallback_roles == [Role.SENSOR_NODE, Role.CAMERA_NODE]


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("FALLBACK_ROLES", "esp32std, esp32std")
    monkeypatch.setenv("IMAGE_QUEUE_CAPACITY", "3")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = RelaySettings.from_env()

    assert settings.port == 8080
    assert settings.fallback_roles == [Role.SENSOR_NODE]
    assert settings.image_queue_capacity == 3
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "env",
    [
        {"FALLBACK_ROLES": "android"},
        {"FALLBACK_ROLES": "esp32std,tractor"},
        {"IMAGE_QUEUE_CAPACITY": "0"},
        {"HEARTBEAT_INTERVAL": "-1"},
        {"LOG_LEVEL": "verbose"},
    ],
)
def test_invalid_settings_are_rejected(env):
    with pytest.raises(pydantic.ValidationError):
        RelaySettings.from_env(env)
