# src/config.py
import os

# 환경 변수에서 설정값을 읽어옵니다. 값이 없으면 개발용 기본값을 사용합니다.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///marketplace.db")

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# 로그인 실패 잠금 정책
MAX_LOGIN_ATTEMPTS = int(os.getenv("MAX_LOGIN_ATTEMPTS", "5"))
LOCKOUT_MINUTES = int(os.getenv("LOCKOUT_MINUTES", "30"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
HTTP_PORT = int(os.getenv("HTTP_PORT", "8000"))

# 초기 Super Admin 계정 (db_init에서 사용)
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@marketplace.local")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin")

# bcrypt 작업 계수 (테스트에서는 낮춰서 사용)
PASSWORD_HASH_ROUNDS = int(os.getenv("PASSWORD_HASH_ROUNDS", "12"))
