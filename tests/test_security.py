import time
from datetime import timedelta

import jwt
import pytest

from utils.security import (
    TokenService,
    hash_password,
    strip_bearer,
    verify_password,
)


@pytest.fixture()
def tokens():
    return TokenService(
        "access-secret",
        "refresh-secret",
        issuer="fullstack-starterkit",
        audience="urn:fullstack-starterkit:audience",
    )


def test_hash_is_salted_and_verifies():
    first = hash_password("hunter22")
    second = hash_password("hunter22")

    assert first != second
    assert first.startswith("$argon2")
    assert verify_password(first, "hunter22")
    assert verify_password(second, "hunter22")


def test_verify_rejects_wrong_password():
    assert not verify_password(hash_password("hunter22"), "hunter23")


@pytest.mark.parametrize("bad_hash", ["", "not-a-hash", "$argon2id$v=19$garbage", None])
def test_verify_malformed_hash_is_not_verified(bad_hash):
    assert verify_password(bad_hash, "hunter22") is False


@pytest.mark.parametrize("subject", [1, 42, 987654321])
def test_access_token_round_trip(tokens, subject):
    claims = tokens.validate_access(tokens.create_access(subject))

    assert claims["sub"] == str(subject)
    assert claims["iss"] == "fullstack-starterkit"
    assert claims["aud"] == "urn:fullstack-starterkit:audience"
    assert claims["exp"] - claims["iat"] == 6 * 3600


def test_refresh_token_lives_seven_days(tokens):
    claims = tokens.validate_refresh(tokens.create_refresh(7))

    assert claims["sub"] == "7"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 3600


def test_access_and_refresh_secrets_are_not_interchangeable(tokens):
    assert tokens.validate_refresh(tokens.create_access(1)) is None
    assert tokens.validate_access(tokens.create_refresh(1)) is None


def test_token_signed_with_other_secret_is_rejected(tokens):
    other = TokenService("other-access", "other-refresh", issuer=tokens.issuer, audience=tokens.audience)

    assert tokens.validate_access(other.create_access(1)) is None
    assert tokens.validate_refresh(other.create_refresh(1)) is None


def test_wrong_audience_is_rejected(tokens):
    other = TokenService("access-secret", "refresh-secret", issuer=tokens.issuer, audience="someone-else")

    assert tokens.validate_access(other.create_access(1)) is None


def test_expired_access_token_is_rejected():
    frozen = time.time() - (6 * 3600 + 5)
    past = TokenService(
        "access-secret",
        "refresh-secret",
        issuer="iss",
        audience="aud",
        clock=lambda: frozen,
    )
    now = TokenService("access-secret", "refresh-secret", issuer="iss", audience="aud")

    assert now.validate_access(past.create_access(1)) is None


def test_expired_refresh_token_is_rejected():
    frozen = time.time() - 10
    past = TokenService(
        "a",
        "r",
        issuer="iss",
        audience="aud",
        refresh_expires=timedelta(seconds=5),
        clock=lambda: frozen,
    )

    assert past.validate_refresh(past.create_refresh(1)) is None


@pytest.mark.parametrize("garbage", [None, "", "abc", "a.b.c", "Bearer "])
def test_validation_never_raises(tokens, garbage):
    assert tokens.validate_access(garbage) is None
    assert tokens.validate_refresh(garbage) is None
    assert TokenService.decode(garbage) is None


def test_decode_reads_subject_without_secret(tokens):
    token = tokens.create_access(99)

    assert TokenService.decode(token)["sub"] == "99"
    assert TokenService.subject_id(TokenService.decode(token)) == 99


def test_decode_ignores_signature_and_expiry():
    forged = jwt.encode({"sub": "5", "exp": 1}, "whatever", algorithm="HS256")

    assert TokenService.decode(forged)["sub"] == "5"


def test_two_tokens_in_the_same_second_differ(tokens):
    assert tokens.create_refresh(1) != tokens.create_refresh(1)


def test_bearer_prefix_is_optional(tokens):
    token = tokens.create_access(3)

    assert strip_bearer(f"Bearer {token}") == token
    assert strip_bearer(token) == token
    assert tokens.validate_access(f"Bearer {token}")["sub"] == "3"


def test_subject_id_rejects_non_numeric():
    assert TokenService.subject_id({"sub": "guest"}) is None
    assert TokenService.subject_id(None) is None


def test_missing_secret_is_a_configuration_error():
    with pytest.raises(ValueError):
        TokenService("", "r", issuer="i", audience="a")
