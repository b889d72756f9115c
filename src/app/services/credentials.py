"""
Credential Verifier

Wraps bcrypt. Verification failures are reported as False, never raised,
so callers can answer every failed login with the same generic error.
"""

import bcrypt

# bcrypt only looks at the first 72 bytes; newer releases reject longer input
MAX_SECRET_BYTES = 72


class CredentialVerifier:
    """One-way password hashing and constant-time verification."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        # Spent on logins for unknown emails so they cost the same as a
        # wrong password for a known one
        self._dummy_hash = bcrypt.hashpw(b"pos-auth-dummy-secret", bcrypt.gensalt(rounds))

    def hash(self, secret: str) -> str:
        return bcrypt.hashpw(_encode(secret), bcrypt.gensalt(self.rounds)).decode()

    def verify(self, stored_hash: str, supplied_secret: str) -> bool:
        """
        Check a secret against a stored bcrypt hash.

        Returns False for a mismatch and for a malformed stored hash.
        """
        if not stored_hash or supplied_secret is None:
            return False
        try:
            return bcrypt.checkpw(_encode(supplied_secret), stored_hash.encode())
        except ValueError:
            return False

    def burn(self, supplied_secret: str) -> bool:
        """Run a verification that always fails, for unknown accounts."""
        bcrypt.checkpw(_encode(supplied_secret or ""), self._dummy_hash)
        return False


def _encode(secret: str) -> bytes:
    return secret.encode()[:MAX_SECRET_BYTES]
