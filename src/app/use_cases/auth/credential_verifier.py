"""
Credential Verifier

Protects and compares account secrets.
"""

import secrets

import bcrypt

PLAIN_SCHEME = "plain"
BCRYPT_SCHEME = "bcrypt"
BCRYPT_ROUNDS = 12
# bcrypt only looks at the first 72 bytes of input
BCRYPT_MAX_BYTES = 72


class CredentialVerifier:
    """
    Business Rules:
    - bcrypt scheme: stored value is a bcrypt hash (cost factor 12)
    - plain scheme: stored value is the secret itself, compared exactly
    - No normalization, no rate limiting, no lockout
    """

    def __init__(self, scheme: str = BCRYPT_SCHEME):
        if scheme not in (PLAIN_SCHEME, BCRYPT_SCHEME):
            raise ValueError(f"Unknown credential scheme: {scheme}")
        self.scheme = scheme

    def protect(self, secret: str) -> str:
        """Turn a submitted secret into the value to store"""
        if self.scheme == PLAIN_SCHEME:
            return secret
        secret_bytes = secret.encode("utf-8")
        if len(secret_bytes) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Secret longer than {BCRYPT_MAX_BYTES} bytes")
        return bcrypt.hashpw(secret_bytes, bcrypt.gensalt(BCRYPT_ROUNDS)).decode()

    def verify(self, candidate: str, stored: str) -> bool:
        if candidate is None or stored is None:
            return False

        candidate_bytes = candidate.encode("utf-8")
        if self.scheme == PLAIN_SCHEME:
            return secrets.compare_digest(candidate_bytes, stored.encode("utf-8"))

        if len(candidate_bytes) > BCRYPT_MAX_BYTES:
            return False
        try:
            return bcrypt.checkpw(candidate_bytes, stored.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash
            return False
