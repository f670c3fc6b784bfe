"""
Blind indexing for encrypted searchable fields

A blind index is an HMAC-SHA256 of a value under a secret that is separate from
the field encryption key. Storing one token per prefix of a phone number lets
"search by the first few digits" run as an indexed equality lookup without
decrypting anything. Rotating the secret invalidates every stored token; run
``salon_os.scripts.rebuild_blind_indexes`` afterwards.
"""

from functools import lru_cache
from typing import Optional, Set
import hashlib
import hmac
import re

from salon_os.core.config import get_settings
from salon_os.core.exceptions import ConfigurationError

_NON_DIGITS = re.compile(r"\D")


def canonicalize_digits(value: str) -> str:
    """Strip everything except digits: "98765-43210" -> "9876543210" """
    return _NON_DIGITS.sub("", value or "")


class BlindIndexer:
    """Keyed, deterministic, one-way tokens for equality and prefix search"""

    def __init__(self, secret: Optional[str]):
        if not secret:
            raise ConfigurationError("BLIND_INDEX_SECRET is not set")
        self._secret = secret.encode("utf-8")

    def blind_index(self, value: str) -> str:
        return hmac.new(self._secret, value.encode("utf-8"), hashlib.sha256).hexdigest()

    def prefix_tokens(self, value: str) -> Set[str]:
        """One token per prefix (length 1..n) of the digits-only form of ``value``"""
        digits = canonicalize_digits(value)
        return {self.blind_index(digits[:length]) for length in range(1, len(digits) + 1)}


@lru_cache()
def get_blind_indexer() -> BlindIndexer:
    """Process-wide indexer built from settings; raises ConfigurationError if misconfigured"""
    return BlindIndexer(get_settings().BLIND_INDEX_SECRET)
