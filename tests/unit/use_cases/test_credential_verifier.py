import bcrypt
import pytest

from src.app.use_cases.auth import CredentialVerifier


def test_plain_scheme_exact_equality():
    verifier = CredentialVerifier("plain")

    assert verifier.protect("pw1") == "pw1"
    assert verifier.verify("pw1", "pw1") is True
    assert verifier.verify("pw1 ", "pw1") is False
    assert verifier.verify("PW1", "pw1") is False
    assert verifier.verify("pw", "pw1") is False
    assert verifier.verify("", "pw1") is False


def test_bcrypt_scheme_round_trip():
    verifier = CredentialVerifier("bcrypt")

    stored = verifier.protect("SecurePass123!")

    assert stored != "SecurePass123!"
    assert stored.startswith("$2")
    assert verifier.verify("SecurePass123!", stored) is True
    assert verifier.verify("SecurePass123", stored) is False


def test_bcrypt_scheme_accepts_existing_hashes():
    verifier = CredentialVerifier("bcrypt")
    stored = bcrypt.hashpw(b"pw1", bcrypt.gensalt(4)).decode()

    assert verifier.verify("pw1", stored) is True


def test_bcrypt_scheme_rejects_non_hash_stored_value():
    """A legacy plaintext value never matches under bcrypt"""
    verifier = CredentialVerifier("bcrypt")

    assert verifier.verify("pw1", "pw1") is False


def test_bcrypt_scheme_rejects_overlong_secret():
    verifier = CredentialVerifier("bcrypt")

    with pytest.raises(ValueError):
        verifier.protect("x" * 73)
    assert verifier.verify("x" * 73, verifier.protect("x" * 72)) is False


def test_unknown_scheme():
    with pytest.raises(ValueError):
        CredentialVerifier("md5")
