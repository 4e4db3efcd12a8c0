"""Random tokens and access codes."""

import secrets
import string


class CryptoService:
    """Generates opaque tokens and numeric codes"""

    def generate_token(self, length: int) -> str:
        """Random URL-safe token of exactly `length` characters"""
        return secrets.token_urlsafe(length)[:length]

    def generate_random_numeric(self, length: int) -> str:
        return "".join(secrets.choice(string.digits) for _ in range(length))

    @staticmethod
    def matches(expected: str, provided: str) -> bool:
        """Constant-time string comparison"""
        return secrets.compare_digest(expected.encode(), provided.encode())
