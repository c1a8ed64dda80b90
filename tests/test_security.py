from datetime import timedelta

import pytest
from fastapi import HTTPException

from spendwise.core.config import Settings
from spendwise.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)

settings = Settings(JWT_SECRET_KEY="unit-test-secret-with-enough-length")


def test_password_hash_and_verify():
    hashed = get_password_hash("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_with_malformed_hash():
    assert not verify_password("anything", "not-a-bcrypt-hash")


def test_token_round_trip():
    token = create_access_token({"sub": "user-1"}, settings)
    assert decode_access_token(token, settings)["sub"] == "user-1"


def test_token_signed_with_other_secret_rejected():
    token = create_access_token({"sub": "user-1"}, Settings(JWT_SECRET_KEY="a-different-secret-of-enough-length"))
    with pytest.raises(HTTPException) as exc:
        decode_access_token(token, settings)
    assert exc.value.detail == "Invalid token"


def test_expired_token_rejected():
    token = create_access_token({"sub": "user-1"}, settings, expires_delta=timedelta(minutes=-1))
    with pytest.raises(HTTPException) as exc:
        decode_access_token(token, settings)
    assert exc.value.status_code == 401
    assert exc.value.detail == "Token expired"


def test_garbage_token_rejected():
    with pytest.raises(HTTPException) as exc:
        decode_access_token("not.a.token", settings)
    assert exc.value.status_code == 401
