"""
CritterTrack Backend — Password Hasher
======================================

What:  bcrypt hashing and verification.
How:   bcrypt is CPU-bound (~250ms at 12 rounds), so both calls run in a
       worker thread via asyncio.to_thread to keep the event loop free.

bcrypt only looks at the first 72 bytes of a password. Longer passwords
are rejected at registration instead of being silently truncated.
"""

import asyncio

import bcrypt

MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def _hash(self, password: bytes) -> str:
        return bcrypt.hashpw(password, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self._hash, password.encode("utf-8"))

    async def verify(self, password: str, password_hash: str) -> bool:
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        try:
            return await asyncio.to_thread(
                bcrypt.checkpw, encoded, password_hash.encode("utf-8")
            )
        except ValueError:
            # Stored value is not a bcrypt hash
            return False
