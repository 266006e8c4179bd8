"""
CritterTrack Backend — Token Service
====================================

What:  Issues and verifies HS256 JSON Web Tokens (PyJWT).
Who:   AccountService issues on register/login; AuthGate verifies on every
       authenticated request.

Claims:
    sub     user id
    userId  user id (kept for clients that read the legacy claim)
    aud     Settings.jwt_audience
    iss     Settings.jwt_issuer
    iat     issuance time (seconds)
    exp     iat + ttl_seconds

Verification is all-or-nothing: any failure yields None and the reason is
logged at DEBUG only. The token itself is never logged.
"""

import logging
import time
from typing import Callable, Optional

import jwt

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
REQUIRED_CLAIMS = ["sub", "aud", "iss", "iat", "exp"]


class TokenService:
    def __init__(
        self,
        secret: str,
        audience: str,
        issuer: str,
        ttl_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
    ):
        self._secret = secret
        self.audience = audience
        self.issuer = issuer
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def issue(self, user_id: str) -> str:
        now = int(self._clock())
        payload = {
            "sub": user_id,
            "userId": user_id,
            "aud": self.audience,
            "iss": self.issuer,
            "iat": now,
            "exp": now + self.ttl_seconds,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> Optional[str]:
        """
        Return the user id carried by `token`, or None if it is not valid.

        Expiry is checked against the injected clock, not by PyJWT, so tests
        can move time forward.
        """
        if not token:
            return None
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
                options={
                    "require": REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.PyJWTError as e:
            logger.debug("Token rejected: %s", type(e).__name__)
            return None

        exp = claims.get("exp")
        if not isinstance(exp, (int, float)) or self._clock() >= exp:
            logger.debug("Token rejected: expired")
            return None

        user_id = claims.get("sub")
        if not isinstance(user_id, str) or not user_id:
            logger.debug("Token rejected: missing subject")
            return None
        return user_id
