"""Unit tests for password hashing."""

from conftest import password_matches

from bookinghub.core.security import PBKDF2_ITERATIONS, hash_password


def test_hash_format():
    """Hashes carry their algorithm, iteration count and salt."""
    stored = hash_password("s3cret-pass")
    algorithm, iterations, salt, digest = stored.split("$")

    assert algorithm == "pbkdf2_sha256"
    assert int(iterations) == PBKDF2_ITERATIONS
    assert len(salt) == 32
    assert len(digest) == 64
    assert "s3cret-pass" not in stored


def test_hash_is_salted():
    assert hash_password("s3cret-pass") != hash_password("s3cret-pass")


def test_hash_recomputes_from_its_salt():
    stored = hash_password("s3cret-pass")

    assert password_matches(stored, "s3cret-pass")
    assert not password_matches(stored, "wrong-pass")
