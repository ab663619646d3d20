"""
Basic usage example of ActivationClient.

Activates a license key on this machine once, stores the token, and on
later runs only checks the stored token offline.
"""

import json
import logging
import os
import sys
import uuid
from pathlib import Path

from tornade_license.client import ActivationClient, verify_token_offline
from tornade_license.common.exceptions import LicenseError

STATE_FILE = Path.home() / ".tornade_activation.json"


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    secret = os.environ["TORNADE_LICENSE_SECRET"]
    key = sys.argv[1] if len(sys.argv) > 1 else input("License key: ").strip()
    device_id = str(uuid.UUID(int=uuid.getnode()))

    if STATE_FILE.exists():
        state = json.loads(STATE_FILE.read_text())
        if verify_token_offline(secret, state["key"], device_id, state["token"]):
            logger.info("License already activated on this device")
            return

    try:
        token = ActivationClient(os.getenv("TORNADE_SERVER_URL")).activate(key, device_id)
    except LicenseError as e:
        logger.error("Activation failed: %s", e.code)
        sys.exit(1)

    STATE_FILE.write_text(json.dumps({"key": key, "token": token}))
    logger.info("License activated")


if __name__ == "__main__":
    main()
