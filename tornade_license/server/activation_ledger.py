"""
Activation ledger: key validation and per-device activation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tornade_license.common.crypto import CryptoUtils
from tornade_license.common.exceptions import (
    InvalidKey,
    InvalidRequest,
    MaxActivationsReached,
    StoreUnavailable,
)
from tornade_license.common.logging_utils import device_hint, key_hint
from tornade_license.common.models import ActivationRecord, ActivationResult

from .key_locks import KeyedLocks

if TYPE_CHECKING:
    from tornade_license.common.config import Config
    from tornade_license.common.interfaces import IActivationStore

KEY_PARTS = 5


def normalize_key(raw_key: str) -> str:
    """Uppercase and trim a license key as typed by a user."""
    return raw_key.upper().strip()


class ActivationLedger:
    """Validates license keys and tracks the devices activated on each.

    Steps from reading a record to writing it back run under a per-key lock,
    and the write itself is a compare-and-set against the record that was
    read, so the device cap holds even when several processes share the
    store.
    """

    def __init__(  # noqa: PLR0913
        self,
        config: Config,
        store: IActivationStore,
        max_activations: int | None = None,
        prefix: str | None = None,
        namespace: str | None = None,
        lock_timeout: float | None = None,
        max_cas_retries: int | None = None,
    ):
        self.config = config
        self.store = store
        self.secret = config.LICENSE_SECRET
        self.max_activations = (
            max_activations if max_activations is not None else config.MAX_ACTIVATIONS
        )
        self.prefix = (prefix or config.LICENSE_PREFIX).upper()
        self.namespace = namespace if namespace is not None else config.STORE_NAMESPACE
        self.lock_timeout = (
            lock_timeout if lock_timeout is not None else config.LOCK_TIMEOUT
        )
        self.max_cas_retries = (
            max_cas_retries if max_cas_retries is not None else config.MAX_CAS_RETRIES
        )
        self.locks = KeyedLocks()
        self.logger = logging.getLogger(__name__)

    def validate_format(self, raw_key: str) -> bool:
        """Check shape, prefix and checksum of a key.

        No record of issued keys is consulted: any checksum-consistent key
        passes.
        """
        parts = normalize_key(raw_key).split("-")
        if len(parts) != KEY_PARTS or parts[0] != self.prefix:
            return False
        payload = "-".join(parts[1:4])
        expected = CryptoUtils.compute_checksum(self.secret, payload)
        return CryptoUtils.equals(parts[4], expected)

    def compute_token(self, key: str, device_id: str) -> str:
        """Token for an already normalized key."""
        return CryptoUtils.compute_activation_token(self.secret, key, device_id)

    def _store_key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    def _checked_key(self, raw_key: str) -> str:
        if not isinstance(raw_key, str) or not raw_key.strip():
            msg = "license key is required"
            raise InvalidRequest(msg)
        key = normalize_key(raw_key)
        if not self.validate_format(key):
            self.logger.info("Rejected malformed license key %s", key_hint(key))
            raise InvalidKey
        return key

    def _read(self, store_key: str) -> ActivationRecord | None:
        try:
            return self.store.get(store_key)
        except StoreUnavailable:
            raise
        except Exception as err:
            self.logger.exception("Activation store read failed")
            raise StoreUnavailable(str(err)) from err

    def _write(
        self,
        store_key: str,
        expected: ActivationRecord | None,
        record: ActivationRecord,
    ) -> bool:
        try:
            return self.store.compare_and_set(store_key, expected, record)
        except StoreUnavailable:
            raise
        except Exception as err:
            self.logger.exception("Activation store write failed")
            raise StoreUnavailable(str(err)) from err

    def get_devices(self, raw_key: str) -> list[str]:
        """Devices currently registered for a key."""
        key = self._checked_key(raw_key)
        stored = self._read(self._store_key(key))
        return list(stored.devices) if stored is not None else []

    def activate(self, raw_key: str, device_id: str) -> ActivationResult:
        """Register ``device_id`` against ``raw_key`` and return its token.

        Re-activating a registered device always succeeds without a write.
        """
        if not isinstance(device_id, str) or not device_id:
            msg = "device id is required"
            raise InvalidRequest(msg)
        key = self._checked_key(raw_key)
        store_key = self._store_key(key)

        with self.locks.hold(store_key, self.lock_timeout):
            for _ in range(self.max_cas_retries + 1):
                stored = self._read(store_key)
                record = stored if stored is not None else ActivationRecord()

                if record.has_device(device_id):
                    self.logger.debug(
                        "Device %s already active on %s",
                        device_hint(device_id),
                        key_hint(key),
                    )
                    return ActivationResult(
                        token=self.compute_token(key, device_id), newly_activated=False
                    )

                if len(record.devices) >= self.max_activations:
                    self.logger.warning(
                        "Max activations reached for key %s", key_hint(key)
                    )
                    raise MaxActivationsReached

                if self._write(store_key, stored, record.with_device(device_id)):
                    self.logger.info(
                        "Activated key %s for device %s",
                        key_hint(key),
                        device_hint(device_id),
                    )
                    return ActivationResult(
                        token=self.compute_token(key, device_id), newly_activated=True
                    )

                self.logger.debug(
                    "Activation record for %s changed concurrently, retrying",
                    key_hint(key),
                )

        self.logger.error(
            "Gave up activating %s after %d conflicting writes",
            key_hint(key),
            self.max_cas_retries + 1,
        )
        msg = "activation record kept changing"
        raise StoreUnavailable(msg)
