# skydb/identity/__init__.py
"""
SkyDB Identity Layer

Deterministic user keypairs derived from credentials.

Usage:
    from skydb.identity import derive_identity, User

    user = derive_identity("alice", "correct horse battery staple")
    assert user == User.new("alice", "correct horse battery staple")
"""

from .core import (
    User,
    derive_identity,
    derive_seed,
    verify_signature,
    SEED_SIZE,
    PUBLIC_KEY_SIZE,
    PRIVATE_KEY_SIZE,
    SIGNATURE_SIZE,
)

__all__ = [
    "User",
    "derive_identity",
    "derive_seed",
    "verify_signature",
    "SEED_SIZE",
    "PUBLIC_KEY_SIZE",
    "PRIVATE_KEY_SIZE",
    "SIGNATURE_SIZE",
]
