import pytest

from .fakes import FakeMetadataServer


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ["GCE_METADATA_HOST", "GCE_METADATA_TIMEOUT", "GCE_METADATA_USER_AGENT"]:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def server() -> FakeMetadataServer:
    return FakeMetadataServer()


@pytest.fixture
def off_gce_server() -> FakeMetadataServer:
    return FakeMetadataServer(on_gce=False)
