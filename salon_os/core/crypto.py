"""
Field-level encryption for personally identifying data

Values are encrypted with AES-256-CBC under one process-wide key and one fixed
IV. Encryption is therefore deterministic: equal plaintexts produce equal
ciphertexts, which keeps exact-match lookups possible on the ciphertext column
and avoids storing a per-record IV. Partial-match search goes through the
blind index instead (see ``salon_os.core.blind_index``).
"""

from functools import lru_cache
from typing import Optional
import binascii

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
import structlog

from salon_os.core.config import get_settings
from salon_os.core.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

KEY_SIZE = 32  # AES-256
BLOCK_SIZE = 16

# Returned in place of a field that cannot be decrypted
DECRYPTION_ERROR = "Decryption Error"


def _decode_hex(name: str, value: Optional[str], expected_length: int) -> bytes:
    if not value:
        raise ConfigurationError(f"{name} is not set")
    try:
        raw = bytes.fromhex(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be hex encoded")
    if len(raw) != expected_length:
        raise ConfigurationError(
            f"{name} must be {expected_length} bytes ({expected_length * 2} hex characters), "
            f"got {len(raw)}"
        )
    return raw


class FieldCipher:
    """Deterministic AES-256-CBC cipher for individual field values"""

    def __init__(self, key: bytes, iv: bytes):
        if len(key) != KEY_SIZE:
            raise ConfigurationError(f"Encryption key must be {KEY_SIZE} bytes")
        if len(iv) != BLOCK_SIZE:
            raise ConfigurationError(f"Encryption IV must be {BLOCK_SIZE} bytes")
        self._key = key
        self._iv = iv

    @classmethod
    def from_hex(cls, key_hex: Optional[str], iv_hex: Optional[str]) -> "FieldCipher":
        return cls(
            _decode_hex("ENCRYPTION_KEY", key_hex, KEY_SIZE),
            _decode_hex("ENCRYPTION_IV", iv_hex, BLOCK_SIZE),
        )

    def _cipher(self) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.CBC(self._iv))

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a string and return the ciphertext as hex"""
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        data = padder.update(plaintext.encode("utf-8")) + padder.finalize()
        encryptor = self._cipher().encryptor()
        return (encryptor.update(data) + encryptor.finalize()).hex()

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a hex ciphertext.

        Corrupted input, foreign ciphertext or a wrong key yield
        ``DECRYPTION_ERROR`` instead of raising; callers must treat it as
        "field unavailable".
        """
        try:
            raw = bytes.fromhex(ciphertext)
            decryptor = self._cipher().decryptor()
            padded = decryptor.update(raw) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            data = unpadder.update(padded) + unpadder.finalize()
            return data.decode("utf-8")
        except (ValueError, TypeError, binascii.Error, UnicodeDecodeError) as e:
            logger.warning("field_decryption_failed", error_type=type(e).__name__)
            return DECRYPTION_ERROR

    def encrypt_optional(self, plaintext: Optional[str]) -> Optional[str]:
        return self.encrypt(plaintext) if plaintext else None

    def decrypt_optional(self, ciphertext: Optional[str]) -> Optional[str]:
        return self.decrypt(ciphertext) if ciphertext else None


@lru_cache()
def get_field_cipher() -> FieldCipher:
    """Process-wide cipher built from settings; raises ConfigurationError if misconfigured"""
    settings = get_settings()
    return FieldCipher.from_hex(settings.ENCRYPTION_KEY, settings.ENCRYPTION_IV)
