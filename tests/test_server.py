from typing import Any

import pytest
from fastapi.testclient import TestClient

from tornade_license.common.config import Config
from tornade_license.common.models import ActivationRecord
from tornade_license.server.core import LicenseServer, build_store
from tornade_license.server.delivery import LoggingKeyDelivery
from tornade_license.server.persistence import (
    InMemoryActivationStore,
    JsonFileActivationStore,
)

from .conftest import FIXED_KEY

ADMIN_PASSWORD = "hunter2"


class RecordingKeyDelivery:
    def __init__(self) -> None:
        self.delivered: list[tuple[str, str]] = []

    def deliver(self, email: str, license_key: str) -> None:
        self.delivered.append((email, license_key))


class UnavailableStore(InMemoryActivationStore):
    def get(self, key: str) -> ActivationRecord | None:
        raise ConnectionError("store down")


@pytest.fixture
def server(config: Config, store: InMemoryActivationStore) -> LicenseServer:
    return LicenseServer(
        config=config,
        store=store,
        delivery=RecordingKeyDelivery(),
        max_activations=2,
        admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture
def client(server: LicenseServer) -> TestClient:
    return TestClient(server.app)


def test_server_initialization(config: Config) -> None:
    server = LicenseServer(config=config)
    assert isinstance(server.store, InMemoryActivationStore)
    assert server.ledger.max_activations == config.MAX_ACTIVATIONS
    assert server.server_host == config.SERVER_HOST
    assert server.server_port == config.SERVER_PORT
    assert isinstance(server.delivery, LoggingKeyDelivery)


def test_build_store_file_backend(config: Config, monkeypatch: Any) -> None:
    monkeypatch.setenv("TORNADE_STORE_BACKEND", "file")
    file_config = Config()
    store = build_store(file_config)
    assert isinstance(store, JsonFileActivationStore)
    assert store.file_path == file_config.STORE_PATH


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200  # noqa: PLR2004
    assert response.json()["status"] == "ok"


def test_activate(client: TestClient, store: InMemoryActivationStore) -> None:
    response = client.post("/api/activate", json={"key": FIXED_KEY, "deviceId": "mac-1"})
    assert response.status_code == 200  # noqa: PLR2004
    token = response.json()["token"]
    assert len(token) == 64  # noqa: PLR2004

    again = client.post(
        "/api/activate", json={"key": FIXED_KEY.lower(), "deviceId": "mac-1"}
    )
    assert again.json() == {"token": token}
    assert store.writes == 1


def test_activate_max_activations(client: TestClient) -> None:
    for device in ("a", "b"):
        ok = client.post("/api/activate", json={"key": FIXED_KEY, "deviceId": device})
        assert ok.status_code == 200  # noqa: PLR2004
    response = client.post("/api/activate", json={"key": FIXED_KEY, "deviceId": "c"})
    assert response.status_code == 429  # noqa: PLR2004
    assert response.json() == {"error": "max_activations_reached"}

    replay = client.post("/api/activate", json={"key": FIXED_KEY, "deviceId": "a"})
    assert replay.status_code == 200  # noqa: PLR2004


def test_activate_invalid_key(client: TestClient) -> None:
    response = client.post(
        "/api/activate", json={"key": FIXED_KEY[:-1] + "0", "deviceId": "a"}
    )
    assert response.status_code == 422  # noqa: PLR2004
    assert response.json() == {"error": "invalid_key"}


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"key": FIXED_KEY},
        {"deviceId": "a"},
        {"key": 123, "deviceId": "a"},
        {"key": FIXED_KEY, "deviceId": None},
        {"key": FIXED_KEY, "deviceId": ""},
        [FIXED_KEY, "a"],
        "key",
    ],
)
def test_activate_invalid_request(client: TestClient, body: Any) -> None:
    response = client.post("/api/activate", json=body)
    assert response.status_code == 400  # noqa: PLR2004
    assert response.json() == {"error": "invalid_request"}


def test_activate_body_not_json(client: TestClient) -> None:
    response = client.post(
        "/api/activate",
        content=b"key=abc",
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 400  # noqa: PLR2004
    assert response.json() == {"error": "invalid_request"}


def test_activate_store_unavailable(config: Config) -> None:
    server = LicenseServer(config=config, store=UnavailableStore())
    client = TestClient(server.app)
    response = client.post("/api/activate", json={"key": FIXED_KEY, "deviceId": "a"})
    assert response.status_code == 503  # noqa: PLR2004
    assert response.json() == {"error": "store_unavailable"}


def test_validate_endpoint(client: TestClient) -> None:
    assert client.post("/api/validate", json={"key": FIXED_KEY}).json() == {
        "valid": True
    }
    assert client.post("/api/validate", json={"key": "TORNADE-1"}).json() == {
        "valid": False
    }


def test_admin_issue(client: TestClient, server: LicenseServer) -> None:
    response = client.post(
        "/admin/issue",
        json={"email": "buyer@example.com", "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200  # noqa: PLR2004
    key = response.json()["license_key"]
    assert server.ledger.validate_format(key)
    assert server.delivery.delivered == [("buyer@example.com", key)]


def test_admin_issue_wrong_password(client: TestClient, server: LicenseServer) -> None:
    response = client.post(
        "/admin/issue", json={"email": "buyer@example.com", "password": "nope"}
    )
    assert response.status_code == 403  # noqa: PLR2004
    assert response.json() == {"error": "forbidden"}
    assert server.delivery.delivered == []


def test_admin_issue_bad_email(client: TestClient) -> None:
    response = client.post(
        "/admin/issue", json={"email": "not-an-address", "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 400  # noqa: PLR2004


def test_admin_activations(client: TestClient) -> None:
    client.post("/api/activate", json={"key": FIXED_KEY, "deviceId": "a"})
    response = client.post(
        "/admin/activations",
        json={"key": FIXED_KEY.lower(), "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200  # noqa: PLR2004
    assert response.json() == {
        "key": FIXED_KEY,
        "devices": ["a"],
        "max_activations": 2,
    }


def test_admin_routes_disabled_without_password(config: Config) -> None:
    server = LicenseServer(config=config)
    routes = [route.path for route in server.app.routes]  # type: ignore[attr-defined]
    assert "/api/activate" in routes
    assert "/admin/issue" not in routes
    assert "/admin/activations" not in routes


def test_logging_delivery_keeps_only_a_key_hint(caplog: Any) -> None:
    delivery = LoggingKeyDelivery()
    with caplog.at_level("INFO", logger="tornade_license.server.delivery"):
        delivery.deliver("buyer@example.com", FIXED_KEY)
    assert "buyer@example.com" in caplog.text
    assert FIXED_KEY not in caplog.text
    assert not hasattr(delivery, "delivered")


def test_explicit_port_zero_is_kept(config: Config) -> None:
    server = LicenseServer(config=config, server_port=0)
    assert server.server_port == 0
