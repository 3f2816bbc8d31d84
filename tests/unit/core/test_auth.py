from datetime import timedelta

from fastapi import HTTPException
import jwt
import pytest

from campuschat.auth import create_access_token, decode_access_token, user_id_from_token
from campuschat.core.config import settings


class TestTokens:
    def test_round_trip_keeps_subject(self):
        token = create_access_token({"sub": "01J8Z3M6Q9R2S4T6V8W0X2Y4Z6", "role": "student"})

        payload = decode_access_token(token)

        assert payload["sub"] == "01J8Z3M6Q9R2S4T6V8W0X2Y4Z6"
        assert payload["role"] == "student"
        assert "exp" in payload

    def test_expired_token_is_rejected(self):
        token = create_access_token({"sub": "someone"}, expires_delta=timedelta(seconds=-1))

        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)


class TestUserIdFromToken:
    def test_valid_token(self):
        token = create_access_token({"sub": "01J8Z3M6Q9R2S4T6V8W0X2Y4Z6"})

        assert user_id_from_token(token) == "01J8Z3M6Q9R2S4T6V8W0X2Y4Z6"

    def test_missing_token(self):
        with pytest.raises(HTTPException) as exc_info:
            user_id_from_token(None)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Not authenticated"

    def test_wrong_signature(self):
        forged = jwt.encode({"sub": "intruder"}, "not-the-secret", algorithm=settings.algorithm)

        with pytest.raises(HTTPException) as exc_info:
            user_id_from_token(forged)

        assert exc_info.value.detail == "Could not validate credentials"

    def test_token_without_subject(self):
        token = create_access_token({"role": "admin"})

        with pytest.raises(HTTPException) as exc_info:
            user_id_from_token(token)

        assert exc_info.value.status_code == 401
