import pytest
from pydantic import ValidationError

from gce_metadata.config import METADATA_IP, USER_AGENT, AppConfig, MetadataConfig


def test_defaults():
    config = MetadataConfig()
    assert config.host == METADATA_IP == "169.254.169.254"
    assert config.timeout == 1.0
    assert config.user_agent == USER_AGENT


def test_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("GCE_METADATA_HOST", "metadata.google.internal")
    monkeypatch.setenv("GCE_METADATA_TIMEOUT", "2.5")
    monkeypatch.setenv("GCE_METADATA_USER_AGENT", "my-app/1.0")
    config = MetadataConfig()
    assert config.host == "metadata.google.internal"
    assert config.timeout == 2.5
    assert config.user_agent == "my-app/1.0"


@pytest.mark.parametrize("host", ["", "   "])
def test_blank_host_falls_back_to_default(monkeypatch: pytest.MonkeyPatch, host: str):
    monkeypatch.setenv("GCE_METADATA_HOST", host)
    assert MetadataConfig().host == METADATA_IP
    assert MetadataConfig(host=host).host == METADATA_IP


@pytest.mark.parametrize("timeout", [0, -1])
def test_timeout_must_be_positive(timeout: float):
    with pytest.raises(ValidationError):
        MetadataConfig(timeout=timeout)


def test_app_config(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("THROW_IF_NOT_ON_GCE", raising=False)
    assert AppConfig().port == 8080
    assert AppConfig().throw_if_not_on_gce is False

    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("THROW_IF_NOT_ON_GCE", "true")
    assert AppConfig().port == 9000
    assert AppConfig().throw_if_not_on_gce is True
