"""
Password storage for `auth_users.encrypted_password`.

Passwords are stored as bcrypt hashes (salt embedded). A stored value that is
not a bcrypt hash never matches.
"""

import bcrypt

MIN_PASSWORD_LENGTH = 6
"""Shortest password accepted at sign-up."""


class EncryptionDec:
    """Hashes, verifies and validates account passwords."""

    def hash_password(self, text: str) -> str:
        """
        Parameters
        ----------
        text : str
            Plaintext password.

        Returns
        -------
        str
            bcrypt hash, ready to store in a TEXT column.
        """
        return bcrypt.hashpw(text.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

    def check_passwords(self, plain_text: str, passwd: str) -> bool:
        """Whether ``plain_text`` matches the stored hash ``passwd``."""
        try:
            return bcrypt.checkpw(plain_text.encode("utf-8"), passwd.encode("utf-8"))
        except ValueError:
            return False

    def is_valid_password(self, password: str | None) -> bool:
        return password is not None and len(password) >= MIN_PASSWORD_LENGTH
