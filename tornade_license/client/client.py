"""
Activation client used by the desktop application.
"""

from __future__ import annotations

import logging

import requests

from tornade_license.common.crypto import CryptoUtils
from tornade_license.common.exceptions import (
    ERRORS_BY_CODE,
    ActivationUnavailable,
    LicenseError,
)
from tornade_license.common.logging_utils import key_hint

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://127.0.0.1:8000"
DEFAULT_TIMEOUT = 10.0


def verify_token_offline(secret: str, key: str, device_id: str, token: str) -> bool:
    """Check a stored activation token without contacting the server."""
    if not key or not device_id or not token:
        return False
    expected = CryptoUtils.compute_activation_token(
        secret, key.upper().strip(), device_id
    )
    return CryptoUtils.equals(token.upper(), expected)


class ActivationClient:
    """Talks to the activation endpoint of the license server."""

    def __init__(
        self,
        server_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.server_url = (server_url or DEFAULT_SERVER_URL).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def activate(self, key: str, device_id: str) -> str:
        """Activate ``key`` on this device and return the activation token.

        Raises the ``LicenseError`` subclass matching the server's answer.
        """
        url = f"{self.server_url}/api/activate"
        try:
            response = self.session.post(
                url, json={"key": key, "deviceId": device_id}, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.warning("Activation request to %s failed: %s", url, e)
            raise ActivationUnavailable(str(e)) from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code == 200 and isinstance(data, dict) and "token" in data:
            logger.info("License %s activated", key_hint(key.strip()))
            return str(data["token"])

        code = data.get("error") if isinstance(data, dict) else None
        error_cls = ERRORS_BY_CODE.get(code or "")
        if error_cls is not None:
            raise error_cls
        msg = f"unexpected response {response.status_code} from {url}"
        raise LicenseError(msg, response.status_code)
