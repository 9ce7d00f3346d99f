"""Password hashing."""

import hashlib
import hmac
import secrets
from typing import Protocol

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 260_000
SALT_BYTES = 16


class PasswordHasher(Protocol):
    def hash(self, plaintext: str) -> str: ...

    def verify(self, plaintext: str, digest: str) -> bool: ...


class Pbkdf2PasswordHasher:
    """PBKDF2-HMAC-SHA256 hasher.

    Digests are stored as ``pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>``.
    """

    def __init__(self, iterations: int = DEFAULT_ITERATIONS):
        self._iterations = iterations

    def hash(self, plaintext: str) -> str:
        salt = secrets.token_bytes(SALT_BYTES)
        derived = self._derive(plaintext, salt, self._iterations)
        return f"{ALGORITHM}${self._iterations}${salt.hex()}${derived.hex()}"

    def verify(self, plaintext: str, digest: str) -> bool:
        """Check a plaintext against a stored digest. Malformed digests never match."""
        try:
            algorithm, iterations, salt_hex, hash_hex = digest.split("$")
            if algorithm != ALGORITHM:
                return False
            derived = self._derive(plaintext, bytes.fromhex(salt_hex), int(iterations))
            expected = bytes.fromhex(hash_hex)
        except ValueError:
            return False
        return hmac.compare_digest(derived, expected)

    @staticmethod
    def _derive(plaintext: str, salt: bytes, iterations: int) -> bytes:
        return hashlib.pbkdf2_hmac("sha256", plaintext.encode("utf-8"), salt, iterations)
