"""
License key generator.
"""

from __future__ import annotations

import logging
import os

from tornade_license.common.config import Config
from tornade_license.common.crypto import CryptoUtils
from tornade_license.common.logging_utils import key_hint

SEGMENT_COUNT = 3
SEGMENT_BYTES = 4


class KeyIssuer:
    """Mints license keys of the form ``PREFIX-SEG1-SEG2-SEG3-CHECKSUM``."""

    def __init__(self, config: Config, prefix: str | None = None):
        self.config = config
        self.secret = config.LICENSE_SECRET
        self.prefix = (prefix or config.LICENSE_PREFIX).upper()
        self.logger = logging.getLogger(__name__)

    def build_key(self, payload: str) -> str:
        """Attach the prefix and checksum to a ``SEG1-SEG2-SEG3`` payload."""
        checksum = CryptoUtils.compute_checksum(self.secret, payload)
        return f"{self.prefix}-{payload}-{checksum}"

    def generate(self) -> str:
        """Generate a fresh license key.

        Every call draws new random segments; nothing is persisted.
        """
        segments = [os.urandom(SEGMENT_BYTES).hex().upper() for _ in range(SEGMENT_COUNT)]
        key = self.build_key("-".join(segments))
        self.logger.debug("Generated license key %s", key_hint(key))
        return key
