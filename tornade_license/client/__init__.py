from tornade_license.client.client import ActivationClient, verify_token_offline

__all__ = ["ActivationClient", "verify_token_offline"]
