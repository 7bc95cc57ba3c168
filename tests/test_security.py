"""
Tests for the security primitives: password hashing, tokens and role checks.

These run without HTTP. They verify:
  - Hashes are salted, embed their parameters, and never equal the plaintext
  - verify() returns False on mismatch and raises only on malformed hashes
  - Tokens round-trip their claims and fail when expired, forged or garbled
  - ensure_role() accepts exactly the requested role
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from book_api.dependencies import ensure_role
from book_api.exceptions import AuthorizationError, InvalidTokenError
from book_api.models.user import Role
from book_api.security import (
    PasswordHasher,
    TokenClaims,
    TokenService,
    check_password_strength,
)


@pytest.fixture
def fast_hasher():
    return PasswordHasher(time_cost=1)


@pytest.fixture
def tokens():
    return TokenService(secret_key="unit-test-secret", ttl=timedelta(days=7))


@pytest.fixture
def claims():
    return TokenClaims(
        id="9b2f3c4e-0000-4000-8000-000000000001",
        username="alice",
        role=Role.USER,
    )


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

class TestPasswordHasher:

    def test_hash_is_not_plaintext_and_verifies(self, fast_hasher):
        hashed = fast_hasher.hash("Abc123!")
        assert hashed != "Abc123!"
        assert fast_hasher.verify("Abc123!", hashed) is True

    def test_wrong_password_returns_false(self, fast_hasher):
        hashed = fast_hasher.hash("Abc123!")
        assert fast_hasher.verify("abc123!", hashed) is False

    def test_same_password_hashes_differently(self, fast_hasher):
        """A random salt per hash defeats precomputed lookups."""
        assert fast_hasher.hash("Abc123!") != fast_hasher.hash("Abc123!")

    def test_hash_embeds_scheme_and_cost(self, fast_hasher):
        hashed = fast_hasher.hash("Abc123!")
        assert hashed.startswith("$argon2")
        assert "t=1" in hashed

    def test_hash_from_other_cost_still_verifies(self, fast_hasher):
        """Parameters come from the stored hash, not from the verifier."""
        hashed = PasswordHasher(time_cost=2).hash("Abc123!")
        assert fast_hasher.verify("Abc123!", hashed) is True

    def test_malformed_hash_raises(self, fast_hasher):
        with pytest.raises(ValueError):
            fast_hasher.verify("Abc123!", "not-a-hash")


class TestPasswordStrength:

    @pytest.mark.parametrize("password", ["Abc123!", "Admin@123", "p4ss-w.rd"])
    def test_strong_passwords(self, password):
        assert check_password_strength(password)

    @pytest.mark.parametrize(
        "password",
        [
            "Ab1!",          # too short
            "abcdef!!",      # no digit
            "123456!!",      # no letter
            "abc12345",      # no special character
        ],
    )
    def test_weak_passwords(self, password):
        assert not check_password_strength(password)


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

class TestTokenService:

    def test_issue_then_verify_returns_claims(self, tokens, claims):
        token = tokens.issue(claims)
        assert tokens.verify(token) == claims

    def test_token_carries_identity_and_expiry(self, tokens, claims):
        payload = jwt.get_unverified_claims(tokens.issue(claims))
        assert payload["id"] == claims.id
        assert payload["username"] == "alice"
        assert payload["role"] == "user"
        assert payload["exp"] - payload["iat"] == int(timedelta(days=7).total_seconds())

    def test_ttl_override(self, tokens, claims):
        payload = jwt.get_unverified_claims(tokens.issue(claims, ttl=timedelta(days=60)))
        assert payload["exp"] - payload["iat"] == int(timedelta(days=60).total_seconds())

    def test_expired_token_is_rejected(self, tokens, claims):
        token = tokens.issue(claims, ttl=timedelta(seconds=-1))
        with pytest.raises(InvalidTokenError):
            tokens.verify(token)

    def test_token_signed_with_other_key_is_rejected(self, tokens, claims):
        other = TokenService(secret_key="a-different-secret")
        with pytest.raises(InvalidTokenError):
            tokens.verify(other.issue(claims))

    def test_tampered_token_is_rejected(self, tokens, claims):
        header, payload, signature = tokens.issue(claims).split(".")
        forged = jwt.encode(
            {"id": claims.id, "username": "alice", "role": "admin",
             "exp": datetime.now(timezone.utc) + timedelta(days=1)},
            "guessed-secret",
        )
        forged_payload = forged.split(".")[1]
        with pytest.raises(InvalidTokenError):
            tokens.verify(f"{header}.{forged_payload}.{signature}")

    @pytest.mark.parametrize("garbage", ["", "totally.fake.token", "abc"])
    def test_malformed_token_is_rejected(self, tokens, garbage):
        with pytest.raises(InvalidTokenError):
            tokens.verify(garbage)

    def test_token_without_claims_is_rejected(self, tokens):
        token = jwt.encode(
            {"sub": "someone", "exp": datetime.now(timezone.utc) + timedelta(days=1)},
            "unit-test-secret",
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            tokens.verify(token)

    def test_token_with_unknown_role_is_rejected(self, tokens, claims):
        token = jwt.encode(
            {"id": claims.id, "username": "alice", "role": "superuser",
             "exp": datetime.now(timezone.utc) + timedelta(days=1)},
            "unit-test-secret",
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            tokens.verify(token)

    def test_invalid_token_error_is_a_403(self):
        assert InvalidTokenError().status_code == 403
        assert InvalidTokenError().detail == "Invalid or expired token"


# ---------------------------------------------------------------------------
# Role checks
# ---------------------------------------------------------------------------

class TestEnsureRole:

    def test_admin_passes_admin_check(self, claims):
        admin = claims.model_copy(update={"role": Role.ADMIN})
        assert ensure_role(admin, Role.ADMIN) is admin

    def test_user_fails_admin_check(self, claims):
        with pytest.raises(AuthorizationError) as exc_info:
            ensure_role(claims, Role.ADMIN, "Only admins can add books")
        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "Only admins can add books"
