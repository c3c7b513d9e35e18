from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable

import jwt

from src import config
from src.services.exceptions import TokenInvalidError
from src.utils.time_utils import utcnow

ALGORITHM = "HS256"

class TokenService:
    """JWT(HS256) 액세스 토큰을 발급하고 검증합니다."""

    def __init__(self, secret_key: str = None, expire_minutes: int = None,
                 clock: Callable[[], datetime] = utcnow):
        self.secret_key = secret_key or config.SECRET_KEY
        self.expire_minutes = expire_minutes or config.ACCESS_TOKEN_EXPIRE_MINUTES
        self.clock = clock

    def issue(self, user_id: int, email: str, roles: Iterable[str]) -> Dict[str, Any]:
        """
        사용자 ID, 이메일, 역할 목록을 담은 토큰을 발급합니다.

        Returns:
            {"token": ..., "expires_at": ISO 8601 문자열}
        """
        expires_at = self.clock() + timedelta(minutes=self.expire_minutes)
        payload = {
            "sub": str(user_id),
            "email": email,
            "roles": list(roles),
            "exp": expires_at,
        }
        token = jwt.encode(payload, self.secret_key, algorithm=ALGORITHM)
        return {"token": token, "expires_at": expires_at.isoformat()}

    def decode(self, token: str) -> Dict[str, Any]:
        """
        토큰을 검증하고 {user_id, email, roles}를 반환합니다.

        Raises:
            TokenInvalidError: 서명이 틀리거나 만료되었거나 형식이 잘못되었을 때.
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise TokenInvalidError("Token has expired.")
        except jwt.PyJWTError:
            raise TokenInvalidError("Token not found or invalid.")

        try:
            user_id = int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            raise TokenInvalidError("Token not found or invalid.")
        return {
            "user_id": user_id,
            "email": payload.get("email"),
            "roles": list(payload.get("roles") or []),
        }
