# Tornade licensing: key issuance and device activation

from tornade_license.client.client import ActivationClient, verify_token_offline
from tornade_license.common.config import Config
from tornade_license.server.activation_ledger import ActivationLedger
from tornade_license.server.key_issuer import KeyIssuer

__all__ = [
    "ActivationClient",
    "ActivationLedger",
    "Config",
    "KeyIssuer",
    "verify_token_offline",
]
