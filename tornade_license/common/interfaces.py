"""
Interfaces and protocols for dependency injection.
"""

from __future__ import annotations

from typing import Protocol

from tornade_license.common.models import ActivationRecord, ActivationResult


class IActivationStore(Protocol):
    """Protocol for the key-value store holding activation records.

    Implementations raise ``StoreUnavailable`` when they cannot complete a
    read or write.
    """

    def get(self, key: str) -> ActivationRecord | None: ...

    def set(self, key: str, record: ActivationRecord) -> None: ...

    def compare_and_set(
        self,
        key: str,
        expected: ActivationRecord | None,
        record: ActivationRecord,
    ) -> bool: ...


class IKeyIssuer(Protocol):
    """Protocol for license key generation."""

    def generate(self) -> str: ...


class IActivationLedger(Protocol):
    """Protocol for key validation and device activation."""

    max_activations: int

    def validate_format(self, raw_key: str) -> bool: ...

    def activate(self, raw_key: str, device_id: str) -> ActivationResult: ...

    def get_devices(self, raw_key: str) -> list[str]: ...


class IKeyDelivery(Protocol):
    """Protocol for handing a freshly issued key to its buyer."""

    def deliver(self, email: str, license_key: str) -> None: ...
