"""
Password hashing utilities using bcrypt
"""

import bcrypt
from fastapi.concurrency import run_in_threadpool

from auth_service.core.exceptions import ValidationError

# bcrypt only looks at the first 72 bytes of input
BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """bcrypt wrapper. The async variants keep the slow hash off the event loop."""

    @staticmethod
    def hash_password(password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password as string

        Raises:
            ValidationError: If the password is longer than bcrypt accepts
        """
        encoded = password.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes"
            )
        return bcrypt.hashpw(encoded, bcrypt.gensalt()).decode("utf-8")

    @staticmethod
    def verify_password(password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Returns:
            True if password matches, False otherwise (including unusable hashes)
        """
        encoded = password.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, hashed_password.encode("utf-8"))
        except ValueError:
            return False

    @classmethod
    async def hash_password_async(cls, password: str) -> str:
        return await run_in_threadpool(cls.hash_password, password)

    @classmethod
    async def verify_password_async(cls, password: str, hashed_password: str) -> bool:
        return await run_in_threadpool(cls.verify_password, password, hashed_password)
