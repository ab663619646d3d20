"""Common cryptographic utilities.
"""

from cryptography.hazmat.primitives import constant_time, hashes, hmac

CHECKSUM_LENGTH = 4


class CryptoUtils:
    """Utility class for cryptographic operations."""

    @staticmethod
    def hmac_sha256_hex(secret: str, message: str) -> str:
        """HMAC-SHA256 of ``message`` under ``secret`` as uppercase hex."""
        mac = hmac.HMAC(secret.encode(), hashes.SHA256())
        mac.update(message.encode())
        return mac.finalize().hex().upper()

    @staticmethod
    def compute_checksum(secret: str, payload: str) -> str:
        """Key checksum: the first four hex characters of the payload HMAC."""
        return CryptoUtils.hmac_sha256_hex(secret, payload)[:CHECKSUM_LENGTH]

    @staticmethod
    def compute_activation_token(secret: str, key: str, device_id: str) -> str:
        """Activation token bound to a normalized key and a device."""
        return CryptoUtils.hmac_sha256_hex(secret, f"{key}:{device_id}")

    @staticmethod
    def equals(a: str, b: str) -> bool:
        """Compare two strings without leaking the mismatch position."""
        return constant_time.bytes_eq(a.encode(), b.encode())
