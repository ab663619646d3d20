# Common utilities
from tornade_license.common.crypto import CryptoUtils as CryptoUtils
from tornade_license.common.logging_utils import setup_logger as setup_logger

__all__ = ["CryptoUtils", "setup_logger"]
