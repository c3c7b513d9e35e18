# tests/services/test_token_service.py
from datetime import timedelta

import jwt
import pytest

from src.services.exceptions import TokenInvalidError
from src.services.token_service import TokenService, ALGORITHM
from src.utils.time_utils import utcnow

SECRET = "test-secret-key-with-enough-length-for-hs256"

def test_issue_and_decode():
    # === Arrange ===
    service = TokenService(secret_key=SECRET, expire_minutes=30)

    # === Act ===
    issued = service.issue(7, "seller@example.com", ["Seller"])
    token_data = service.decode(issued["token"])

    # === Assert ===
    assert token_data == {"user_id": 7, "email": "seller@example.com", "roles": ["Seller"]}
    assert issued["expires_at"]

def test_subject_is_encoded_as_string():
    service = TokenService(secret_key=SECRET)
    token = service.issue(7, "a@example.com", [])["token"]

    payload = jwt.decode(token, SECRET, algorithms=[ALGORITHM])

    assert payload["sub"] == "7"

def test_expired_token_is_rejected():
    # 두 시간 전 시각으로 발급 → 이미 만료
    service = TokenService(secret_key=SECRET, expire_minutes=60, clock=lambda: utcnow() - timedelta(hours=2))
    token = service.issue(1, "a@example.com", [])["token"]

    with pytest.raises(TokenInvalidError):
        service.decode(token)

def test_token_signed_with_other_key_is_rejected():
    token = TokenService(secret_key="another-secret-key-with-enough-length!!").issue(1, "a@example.com", [])["token"]

    with pytest.raises(TokenInvalidError):
        TokenService(secret_key=SECRET).decode(token)

@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_malformed_token_is_rejected(token):
    with pytest.raises(TokenInvalidError):
        TokenService(secret_key=SECRET).decode(token)
