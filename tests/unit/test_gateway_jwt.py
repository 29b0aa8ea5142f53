"""Unit tests for JWT handler."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from jose import jwt

from src.cv_common.errors import InvalidCredentialsError, InvalidRefreshTokenError
from src.cv_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)


def test_access_token_carries_subject_and_type() -> None:
    payload = jwt.get_unverified_claims(create_access_token("voter-1"))
    assert payload["sub"] == "voter-1"
    assert payload["type"] == "access"


def test_refresh_token_carries_subject_and_type() -> None:
    payload = jwt.get_unverified_claims(create_refresh_token("voter-1"))
    assert payload["sub"] == "voter-1"
    assert payload["type"] == "refresh"


def test_decode_round_trip_for_access() -> None:
    payload = decode_token(create_access_token("organizer-9"), expected_type="access")
    assert payload["sub"] == "organizer-9"


def test_refresh_token_cannot_authenticate_requests() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token(create_refresh_token("voter-1"), expected_type="access")


def test_access_token_cannot_refresh() -> None:
    with pytest.raises(InvalidRefreshTokenError):
        decode_token(create_access_token("voter-1"), expected_type="refresh")


def test_expired_access_token_rejected() -> None:
    with patch("src.cv_gateway.auth.jwt_handler._ACCESS_EXPIRE", timedelta(seconds=-1)):
        token = create_access_token("voter-1")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token, expected_type="access")


def test_expired_refresh_token_rejected() -> None:
    with patch("src.cv_gateway.auth.jwt_handler._REFRESH_EXPIRE", timedelta(seconds=-1)):
        token = create_refresh_token("voter-1")
    with pytest.raises(InvalidRefreshTokenError):
        decode_token(token, expected_type="refresh")


def test_tampered_signature_rejected() -> None:
    token = create_access_token("voter-1")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token[:-4] + "xxxx", expected_type="access")
