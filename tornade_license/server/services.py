"""Business logic services for the license server.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from tornade_license.common.exceptions import Forbidden, InvalidRequest
from tornade_license.common.logging_utils import key_hint
from tornade_license.server.activation_ledger import normalize_key

if TYPE_CHECKING:
    import logging

    from tornade_license.common.config import Config
    from tornade_license.common.interfaces import (
        IActivationLedger,
        IKeyDelivery,
        IKeyIssuer,
    )
    from tornade_license.common.models import (
        ActivateRequest,
        ActivationStatusRequest,
        IssueLicenseRequest,
        ValidateKeyRequest,
    )


class LicenseService:
    """Handles business logic for the license server."""

    def __init__(
        self,
        config: Config,
        key_issuer: IKeyIssuer,
        ledger: IActivationLedger,
        delivery: IKeyDelivery,
        logger: logging.Logger,
        admin_password: str | None = None,
    ):
        self.config = config
        self.key_issuer = key_issuer
        self.ledger = ledger
        self.delivery = delivery
        self.logger = logger
        self.admin_password = admin_password

    def health(self) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "timestamp": int(time.time())}

    def _check_admin(self, password: str) -> None:
        if self.admin_password is None or password != self.admin_password:
            msg = "Invalid admin password"
            raise Forbidden(msg)

    def issue_license(self, email: str) -> str:
        """Mint one key for a completed payment and hand it to delivery.

        A delivery failure propagates after the key was minted; the caller
        decides whether to retry.
        """
        email = email.strip()
        if "@" not in email:
            msg = "recipient address is not an e-mail address"
            raise InvalidRequest(msg)
        license_key = self.key_issuer.generate()
        self.logger.info("Generated license key %s for %s", key_hint(license_key), email)
        self.delivery.deliver(email, license_key)
        return license_key

    def activate(self, req: ActivateRequest) -> dict[str, str]:
        """Handle /api/activate business logic."""
        result = self.ledger.activate(req.key, req.device_id)
        return {"token": result.token}

    def validate_key(self, req: ValidateKeyRequest) -> dict[str, bool]:
        """Handle /api/validate business logic."""
        return {"valid": self.ledger.validate_format(req.key)}

    def issue(self, req: IssueLicenseRequest) -> dict[str, str]:
        """Handle /admin/issue business logic."""
        self._check_admin(req.password)
        return {"license_key": self.issue_license(req.email)}

    def activation_status(self, req: ActivationStatusRequest) -> dict[str, Any]:
        """Handle /admin/activations business logic."""
        self._check_admin(req.password)
        devices = self.ledger.get_devices(req.key)
        return {
            "key": normalize_key(req.key),
            "devices": devices,
            "max_activations": self.ledger.max_activations,
        }
