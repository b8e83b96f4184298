# skydb/identity/core.py
"""
SkyDB Identity: Credentials → Ed25519 → User ID

The (username, password) pair is the single source of truth for a user:

    salt = SHA-256("skydb-user-salt" || username)
    seed = PBKDF2-HMAC-SHA256(password, salt, 1000 iterations, 32 bytes)
    keys = Ed25519 keypair seeded with `seed`
    id   = hex(public key)

Deterministic: the same credentials always yield the same keypair, in any
process, at any time. Nothing is persisted and nothing is random.

Usage:
    from skydb.identity import derive_identity

    user = derive_identity("john.doe@example.com", "supersecret")
    user.id          # 64 hex chars
    sig = user.sign(b"message")
    user.verify(b"message", sig)  # True
"""

from __future__ import annotations

import hashlib
from typing import Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from ..errors import EncodingError


# =============================================================================
# Constants
# =============================================================================

SEED_SIZE = 32
PUBLIC_KEY_SIZE = 32
PRIVATE_KEY_SIZE = 64
SIGNATURE_SIZE = 64

SALT_DOMAIN = b"skydb-user-salt"
KDF_ITERATIONS = 1000

Credential = Union[str, bytes]


def _as_bytes(value: Credential, name: str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    raise EncodingError(f"{name} must be str or bytes, got {type(value).__name__}")


def derive_seed(username: Credential, password: Credential) -> bytes:
    """
    Derive the 32-byte Ed25519 seed for a credential pair.

    Raises:
        EncodingError: If username is empty or not str/bytes
    """
    user_bytes = _as_bytes(username, "username")
    pass_bytes = _as_bytes(password, "password")
    if not user_bytes:
        raise EncodingError("username must not be empty")

    salt = hashlib.sha256(SALT_DOMAIN + user_bytes).digest()
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=SEED_SIZE,
        salt=salt,
        iterations=KDF_ITERATIONS,
    )
    return kdf.derive(pass_bytes)


# =============================================================================
# User
# =============================================================================

class User:
    """
    A registry identity: an Ed25519 keypair.

    The private key stays inside the instance; only `public_key` and `id`
    are meant to leave the process.
    """

    def __init__(self, signing_key: SigningKey):
        self._signing_key = signing_key
        self._verify_key = signing_key.verify_key
        self.public_key: bytes = bytes(self._verify_key)

    @classmethod
    def new(cls, username: Credential, password: Credential) -> "User":
        """Derive a user from credentials."""
        return cls(SigningKey(derive_seed(username, password)))

    @classmethod
    def from_seed(cls, seed: bytes) -> "User":
        """Create a user from a raw 32-byte seed."""
        if len(seed) != SEED_SIZE:
            raise EncodingError(f"Seed must be exactly {SEED_SIZE} bytes")
        return cls(SigningKey(seed))

    @property
    def id(self) -> str:
        """Hex-encoded public key, as sent to the portal."""
        return self.public_key.hex()

    @property
    def _private_key(self) -> bytes:
        """64-byte expanded private key (seed || public key). Never leaves the instance."""
        return bytes(self._signing_key) + self.public_key

    def sign(self, message: bytes) -> bytes:
        """Sign message with Ed25519 (detached, 64 bytes)."""
        return bytes(self._signing_key.sign(message).signature)

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Verify a signature against this user's public key."""
        return verify_signature(self.public_key, message, signature)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self.public_key == other.public_key

    def __hash__(self) -> int:
        return hash(self.public_key)

    def __repr__(self) -> str:
        return f"User(id={self.id[:16]}...)"


def verify_signature(public_key: bytes, message: bytes, signature: bytes) -> bool:
    """Pure Ed25519 check: False for bad signatures, keys or lengths."""
    if len(public_key) != PUBLIC_KEY_SIZE or len(signature) != SIGNATURE_SIZE:
        return False
    try:
        VerifyKey(public_key).verify(message, signature)
        return True
    except BadSignatureError:
        return False


def derive_identity(username: Credential, password: Credential) -> User:
    """Derive the deterministic registry identity for a credential pair."""
    return User.new(username, password)
