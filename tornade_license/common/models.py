"""
Pydantic models for request/response validation.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class ActivationRecord(BaseModel):
    """Devices that have activated one license key."""

    devices: list[str] = Field(default_factory=list)

    def has_device(self, device_id: str) -> bool:
        return device_id in self.devices

    def with_device(self, device_id: str) -> ActivationRecord:
        """Copy of the record with ``device_id`` appended."""
        if device_id in self.devices:
            return self.model_copy(deep=True)
        return ActivationRecord(devices=[*self.devices, device_id])


class ActivationResult(BaseModel):
    token: str
    newly_activated: bool


class ActivateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: StrictStr = Field(min_length=1)
    device_id: StrictStr = Field(alias="deviceId", min_length=1)


class ActivateResponse(BaseModel):
    token: str


class ValidateKeyRequest(BaseModel):
    key: StrictStr


class ValidateKeyResponse(BaseModel):
    valid: bool


class ErrorResponse(BaseModel):
    error: str


class IssueLicenseRequest(BaseModel):
    email: StrictStr = Field(min_length=3)
    password: StrictStr


class IssueLicenseResponse(BaseModel):
    license_key: str


class ActivationStatusRequest(BaseModel):
    key: StrictStr = Field(min_length=1)
    password: StrictStr


class ActivationStatusResponse(BaseModel):
    key: str
    devices: list[str]
    max_activations: int
