"""Tests for credential-derived identities."""

import secrets

import pytest

from skydb.errors import EncodingError
from skydb.identity import (
    PUBLIC_KEY_SIZE,
    PRIVATE_KEY_SIZE,
    User,
    derive_identity,
    derive_seed,
)


class TestDeriveIdentity:
    """Test derive_identity / User.new."""

    def test_user_has_id(self):
        """A derived user exposes a non-empty hex id."""
        user = User.new("john.doe@example.com", "supersecret")
        assert len(user.id) == 2 * PUBLIC_KEY_SIZE
        assert bytes.fromhex(user.id) == user.public_key

    def test_deterministic(self):
        """100 derivations from random credentials agree."""
        username = secrets.token_bytes(6 + secrets.randbelow(19))
        password = secrets.token_bytes(12 + secrets.randbelow(53))
        expected = derive_identity(username, password)
        for _ in range(100):
            user = derive_identity(username, password)
            assert user.id == expected.id
            assert user._private_key == expected._private_key

    def test_str_and_utf8_bytes_agree(self):
        """str credentials are UTF-8 encoded."""
        a = derive_identity("jöhn", "pässword")
        b = derive_identity("jöhn".encode("utf-8"), "pässword".encode("utf-8"))
        assert a == b

    def test_distinct_passwords_distinct_keys(self):
        assert derive_identity("alice", "one").id != derive_identity("alice", "two").id

    def test_distinct_usernames_distinct_keys(self):
        assert derive_identity("alice", "pw").id != derive_identity("bob", "pw").id

    def test_boundary_shift_distinct_keys(self):
        """Moving bytes between username and password changes the key."""
        assert derive_identity("ab", "c").id != derive_identity("a", "bc").id

    def test_empty_username_rejected(self):
        with pytest.raises(EncodingError):
            derive_identity("", "supersecret")

    def test_non_string_rejected(self):
        with pytest.raises(EncodingError):
            derive_identity(42, "supersecret")

    def test_empty_password_accepted(self):
        user = derive_identity("alice", "")
        assert len(user.public_key) == PUBLIC_KEY_SIZE

    def test_seed_is_not_password(self):
        """The seed is a hardened derivation, never the raw password."""
        password = b"x" * 32
        assert derive_seed("alice", password) != password


class TestUser:
    """Test User key handling."""

    def test_private_key_layout(self, user):
        """64-byte private key ends with the public key."""
        assert len(user._private_key) == PRIVATE_KEY_SIZE
        assert user._private_key[32:] == user.public_key

    def test_from_seed_roundtrip(self, user):
        assert User.from_seed(user._private_key[:32]) == user

    def test_from_seed_wrong_size(self):
        with pytest.raises(EncodingError):
            User.from_seed(b"short")

    def test_sign_verify(self, user, other_user):
        sig = user.sign(b"message")
        assert len(sig) == 64
        assert user.verify(b"message", sig)
        assert not user.verify(b"messagE", sig)
        assert not other_user.verify(b"message", sig)

    def test_repr_hides_private_key(self, user):
        assert user._private_key.hex() not in repr(user)
        assert user._private_key[:32].hex() not in repr(user)

    def test_no_public_private_key(self, user):
        assert not hasattr(user, "private_key")
        assert "private_key" not in User.__dict__
