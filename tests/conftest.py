from pathlib import Path
from typing import Any

import pytest

from tornade_license.common.config import Config
from tornade_license.server.activation_ledger import ActivationLedger
from tornade_license.server.key_issuer import KeyIssuer
from tornade_license.server.persistence import InMemoryActivationStore

SECRET = "s3cret"
# HMAC-SHA256("s3cret", "AAAAAAAA-BBBBBBBB-CCCCCCCC")[:4]
FIXED_PAYLOAD = "AAAAAAAA-BBBBBBBB-CCCCCCCC"
FIXED_KEY = "TORNADE-AAAAAAAA-BBBBBBBB-CCCCCCCC-1038"


@pytest.fixture
def config(monkeypatch: Any, tmp_path: Path) -> Config:
    """Config with a known secret and a throwaway data directory."""
    for name in (
        "MAX_ACTIVATIONS",
        "TORNADE_LICENSE_PREFIX",
        "TORNADE_STORE_PATH",
        "TORNADE_STORE_NAMESPACE",
        "TORNADE_ADMIN_PASSWORD",
        "TORNADE_LOCK_TIMEOUT",
        "TORNADE_MAX_CAS_RETRIES",
        "TORNADE_LOG_LEVEL",
        "TORNADE_SERVER_HOST",
        "TORNADE_SERVER_PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TORNADE_LICENSE_SECRET", SECRET)
    monkeypatch.setenv("TORNADE_STORE_BACKEND", "memory")
    monkeypatch.setenv("TORNADE_DATA_DIR", str(tmp_path / "data"))
    return Config()


@pytest.fixture
def store() -> InMemoryActivationStore:
    return InMemoryActivationStore()


@pytest.fixture
def issuer(config: Config) -> KeyIssuer:
    return KeyIssuer(config)


@pytest.fixture
def ledger(config: Config, store: InMemoryActivationStore) -> ActivationLedger:
    return ActivationLedger(config, store)
