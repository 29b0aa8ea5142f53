"""Unit tests for password hashing utilities."""

from src.cv_gateway.auth.password import hash_password, verify_password


def test_hash_is_not_plain():
    hashed = hash_password("VoteSecret1")
    assert hashed != "VoteSecret1"
    assert hashed.startswith("$2")


def test_verify_correct_password():
    assert verify_password("VoteSecret1", hash_password("VoteSecret1")) is True


def test_verify_wrong_password():
    assert verify_password("WrongPass9", hash_password("VoteSecret1")) is False


def test_salted_hashes_differ():
    assert hash_password("VoteSecret1") != hash_password("VoteSecret1")


def test_malformed_stored_hash_never_matches():
    assert verify_password("VoteSecret1", "not-a-bcrypt-hash") is False
