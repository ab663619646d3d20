"""
Key delivery collaborators.
"""

from __future__ import annotations

import logging

from tornade_license.common.logging_utils import key_hint

logger = logging.getLogger(__name__)


class LoggingKeyDelivery:
    """Records deliveries in the log instead of sending e-mail.

    Stands in for the mail provider when none is wired up; the full key is
    never written to the log.
    """

    def deliver(self, email: str, license_key: str) -> None:
        logger.info("License key %s issued for %s", key_hint(license_key), email)
