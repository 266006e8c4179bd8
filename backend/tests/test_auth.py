"""
CritterTrack Backend — Token, Auth Gate and Password Hasher Tests
=================================================================

What we test:
    ✅ issue → verify round trip returns the user id
    ✅ expiry, wrong secret/audience/issuer, garbage and missing claims → None
    ✅ AuthGate raises the same UnauthenticatedError for every failure
    ✅ bcrypt hash/verify, including over-long passwords
"""

import time

import jwt
import pytest

from crittertrack.exceptions import UnauthenticatedError
from crittertrack.services.auth_gate import AuthGate, Identity
from crittertrack.services.password_hasher import PasswordHasher
from crittertrack.services.token_service import TokenService

SECRET = "unit-test-secret-0123456789abcdef0123456789"
AUDIENCE = "crittertrack-users"
ISSUER = "http://0.0.0.0:8080/"


class FakeClock:
    def __init__(self):
        self.now = time.time()

    def __call__(self) -> float:
        return self.now


def make_service(clock=None, **overrides) -> TokenService:
    params = {
        "secret": SECRET,
        "audience": AUDIENCE,
        "issuer": ISSUER,
        "ttl_seconds": 3600,
    }
    params.update(overrides)
    if clock is not None:
        params["clock"] = clock
    return TokenService(**params)


class TestTokenService:

    def test_issue_then_verify_returns_user_id(self):
        service = make_service()
        token = service.issue("user-123")
        assert service.verify(token) == "user-123"

    def test_claims(self):
        clock = FakeClock()
        service = make_service(clock=clock)
        token = service.issue("user-123")

        claims = jwt.decode(token, SECRET, algorithms=["HS256"], audience=AUDIENCE)
        assert claims["sub"] == "user-123"
        assert claims["userId"] == "user-123"
        assert claims["iss"] == ISSUER
        assert claims["exp"] - claims["iat"] == 3600

    def test_valid_just_before_expiry(self):
        clock = FakeClock()
        service = make_service(clock=clock)
        token = service.issue("user-123")

        clock.now += 3599
        assert service.verify(token) == "user-123"

    def test_expired_after_ttl(self):
        clock = FakeClock()
        service = make_service(clock=clock)
        token = service.issue("user-123")

        clock.now += 3601
        assert service.verify(token) is None

    def test_wrong_secret_rejected(self):
        token = make_service(secret="another-secret-0123456789abcdef0123").issue("user-123")
        assert make_service().verify(token) is None

    def test_wrong_audience_rejected(self):
        token = make_service(audience="someone-else").issue("user-123")
        assert make_service().verify(token) is None

    def test_wrong_issuer_rejected(self):
        token = make_service(issuer="https://evil.example/").issue("user-123")
        assert make_service().verify(token) is None

    @pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b.c", "Bearer xyz"])
    def test_malformed_token_rejected(self, garbage):
        assert make_service().verify(garbage) is None

    def test_missing_subject_rejected(self):
        now = int(time.time())
        token = jwt.encode(
            {"aud": AUDIENCE, "iss": ISSUER, "iat": now, "exp": now + 60},
            SECRET,
            algorithm="HS256",
        )
        assert make_service().verify(token) is None

    def test_missing_expiry_rejected(self):
        token = jwt.encode(
            {"sub": "user-123", "aud": AUDIENCE, "iss": ISSUER, "iat": int(time.time())},
            SECRET,
            algorithm="HS256",
        )
        assert make_service().verify(token) is None

    def test_alg_none_rejected(self):
        now = int(time.time())
        token = jwt.encode(
            {"sub": "user-123", "aud": AUDIENCE, "iss": ISSUER, "iat": now, "exp": now + 60},
            None,
            algorithm="none",
        )
        assert make_service().verify(token) is None


class TestAuthGate:

    def setup_method(self):
        self.clock = FakeClock()
        self.tokens = make_service(clock=self.clock)
        self.gate = AuthGate(self.tokens)

    def test_valid_token_yields_identity(self):
        identity = self.gate.authenticate(self.tokens.issue("user-9"))
        assert identity == Identity(user_id="user-9")

    def test_identity_is_immutable(self):
        identity = self.gate.authenticate(self.tokens.issue("user-9"))
        with pytest.raises(AttributeError):
            identity.user_id = "someone-else"

    @pytest.mark.parametrize("raw", [None, "", "garbage"])
    def test_rejections_share_one_message(self, raw):
        with pytest.raises(UnauthenticatedError) as exc_info:
            self.gate.authenticate(raw)
        assert exc_info.value.message == "Authentication required"

    def test_expired_token_same_message(self):
        token = self.tokens.issue("user-9")
        self.clock.now += 7200
        with pytest.raises(UnauthenticatedError) as exc_info:
            self.gate.authenticate(token)
        assert exc_info.value.message == "Authentication required"


class TestPasswordHasher:

    def setup_method(self):
        self.hasher = PasswordHasher(rounds=4)

    @pytest.mark.asyncio
    async def test_hash_is_not_plaintext_and_verifies(self):
        hashed = await self.hasher.hash("correct horse battery")
        assert "correct horse" not in hashed
        assert hashed.startswith("$2")
        assert await self.hasher.verify("correct horse battery", hashed)

    @pytest.mark.asyncio
    async def test_wrong_password_fails(self):
        hashed = await self.hasher.hash("correct horse battery")
        assert not await self.hasher.verify("wrong horse battery", hashed)

    @pytest.mark.asyncio
    async def test_same_password_different_salts(self):
        first = await self.hasher.hash("correct horse battery")
        second = await self.hasher.hash("correct horse battery")
        assert first != second

    @pytest.mark.asyncio
    async def test_over_long_password_never_verifies(self):
        hashed = await self.hasher.hash("x" * 72)
        assert not await self.hasher.verify("x" * 73, hashed)

    @pytest.mark.asyncio
    async def test_non_bcrypt_hash_fails_cleanly(self):
        assert not await self.hasher.verify("whatever-password", "not-a-bcrypt-hash")
