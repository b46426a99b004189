"""Unit tests for token inspection"""

import time

from jose import jwt

from money_tracker.core.security import (
    decode_unverified_claims,
    get_token_expiry,
    is_token_expired,
)


def test_claims_read_without_key(token_factory):
    """Test claims decode without the signing key"""
    claims = decode_unverified_claims(token_factory("bob"))

    assert claims["sub"] == "bob"


def test_garbage_token_has_no_claims():
    """Test a non-JWT string is not decodable"""
    assert decode_unverified_claims("not-a-jwt") is None
    assert get_token_expiry("not-a-jwt") is None


def test_expiry_from_claim(token_factory):
    """Test the exp claim is returned as a timestamp"""
    before = time.time()
    expiry = get_token_expiry(token_factory(expires_in=600))

    assert before + 590 < expiry < before + 610


def test_future_token_not_expired(token_factory):
    """Test a fresh token is usable"""
    assert is_token_expired(token_factory(expires_in=600)) is False


def test_past_token_expired(token_factory):
    """Test a token whose exp has passed"""
    assert is_token_expired(token_factory(expires_in=-1)) is True


def test_leeway(token_factory):
    """Test tokens about to expire count as expired within the leeway"""
    token = token_factory(expires_in=30)

    assert is_token_expired(token) is False
    assert is_token_expired(token, leeway_seconds=60) is True


def test_explicit_now():
    """Test the comparison uses the supplied clock"""
    token = jwt.encode({"sub": "x", "exp": 1000}, "key", algorithm="HS256")

    assert is_token_expired(token, now=999) is False
    assert is_token_expired(token, now=1000) is True


def test_token_without_exp_not_expired():
    """Test tokens without an expiry are left to the server"""
    token = jwt.encode({"sub": "x"}, "key", algorithm="HS256")

    assert get_token_expiry(token) is None
    assert is_token_expired(token) is False
