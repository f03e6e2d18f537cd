"""Password hashing on top of passlib's bcrypt handler"""

from functools import cached_property

from passlib.hash import bcrypt

from config import settings


class PasswordHasher:
    """bcrypt hashing with a configurable work factor"""

    def __init__(self, rounds: int = settings.BCRYPT_SALT_ROUNDS):
        self.rounds = rounds
        self._handler = bcrypt.using(rounds=rounds)

    def hash(self, password: str) -> str:
        return self._handler.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison; malformed hashes count as a mismatch"""
        try:
            return bcrypt.verify(password, password_hash)
        except ValueError:
            return False

    @cached_property
    def _dummy_hash(self) -> str:
        return self._handler.hash("dummy-password-for-timing")

    def burn_verify(self, password: str) -> None:
        """Spend one verification on a throwaway hash so unknown users cost as much as wrong passwords"""
        bcrypt.verify(password, self._dummy_hash)


password_hasher = PasswordHasher()
