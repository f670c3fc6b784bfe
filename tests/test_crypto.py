"""
Unit tests for field encryption
"""

import pytest

from salon_os.core.crypto import DECRYPTION_ERROR, FieldCipher, get_field_cipher
from salon_os.core.exceptions import ConfigurationError

KEY = bytes(range(32))
IV = bytes(range(16))


@pytest.fixture
def cipher():
    return FieldCipher(KEY, IV)


def test_encrypt_decrypt_roundtrip(cipher):
    """Decrypting a ciphertext gives back the original value"""
    for value in ["9876543210", "Priya Sharma", "", "Zoë Ångström", "x" * 100]:
        assert cipher.decrypt(cipher.encrypt(value)) == value


def test_encryption_is_deterministic(cipher):
    """Equal plaintexts encrypt to equal ciphertexts under the same key"""
    assert cipher.encrypt("9876543210") == cipher.encrypt("9876543210")
    assert cipher.encrypt("9876543210") != cipher.encrypt("9876543211")


def test_ciphertext_is_hex_and_block_aligned(cipher):
    ciphertext = cipher.encrypt("hello")
    raw = bytes.fromhex(ciphertext)
    assert len(raw) == 16
    # A full block of padding is added when the input is block aligned
    assert len(bytes.fromhex(cipher.encrypt("a" * 16))) == 32


def test_decrypt_garbage_returns_sentinel(cipher):
    """Malformed input never raises"""
    assert cipher.decrypt("not-hex") == DECRYPTION_ERROR
    assert cipher.decrypt("abc") == DECRYPTION_ERROR
    assert cipher.decrypt("00" * 15) == DECRYPTION_ERROR


def test_decrypt_with_wrong_key_does_not_return_plaintext(cipher):
    other = FieldCipher(bytes(reversed(KEY)), IV)
    result = other.decrypt(cipher.encrypt("9876543210"))
    assert result != "9876543210"


def test_optional_helpers(cipher):
    assert cipher.encrypt_optional(None) is None
    assert cipher.decrypt_optional(None) is None
    assert cipher.decrypt_optional(cipher.encrypt_optional("a@b.com")) == "a@b.com"


def test_invalid_key_material_rejected():
    """Bad key material stops startup instead of producing a weak cipher"""
    with pytest.raises(ConfigurationError):
        FieldCipher(b"short", IV)
    with pytest.raises(ConfigurationError):
        FieldCipher(KEY, b"short")
    with pytest.raises(ConfigurationError):
        FieldCipher.from_hex(None, IV.hex())
    with pytest.raises(ConfigurationError):
        FieldCipher.from_hex("zz" * 32, IV.hex())
    with pytest.raises(ConfigurationError):
        FieldCipher.from_hex(KEY.hex()[:-2], IV.hex())


def test_settings_cipher_is_configured():
    cipher = get_field_cipher()
    assert cipher.decrypt(cipher.encrypt("ok")) == "ok"
