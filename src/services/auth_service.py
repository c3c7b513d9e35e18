import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from passlib.context import CryptContext

from src import config
from src.database import models
from src.repositories.interfaces import IUnitOfWork, IUserRepository, IRoleRepository
from src.services.dto import user_to_dict
from src.services.exceptions import (
    AuthenticationError, AccountLockedError, EmailAlreadyExistsError, PermissionDeniedError
)
from src.services.token_service import TokenService
from src.services.validation import optional_text, require_text
from src.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=config.PASSWORD_HASH_ROUNDS)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


def require_any_role(token_data: Dict[str, Any], *role_names: str) -> Dict[str, Any]:
    """
    토큰의 역할 중 하나라도 role_names에 포함되는지 확인합니다.

    Raises:
        PermissionDeniedError: 필요한 역할이 하나도 없을 때.
    """
    if not set(token_data.get("roles") or []) & set(role_names):
        raise PermissionDeniedError(f"One of roles {list(role_names)} is required.")
    return token_data


class AuthService:
    """회원가입, 로그인(실패 횟수 잠금 포함), 토큰 검증을 담당합니다."""

    def __init__(self, user_repo: IUserRepository, role_repo: IRoleRepository, unit_of_work: IUnitOfWork,
                 token_service: TokenService, clock: Callable[[], datetime] = utcnow,
                 max_login_attempts: int = None, lockout_minutes: int = None):
        """
        AuthService를 초기화합니다.

        Args:
            user_repo: 사용자 데이터에 접근하기 위한 리포지토리.
            role_repo: 기본 역할(Buyer)을 조회하기 위한 리포지토리.
            unit_of_work: 변경 작업을 하나의 트랜잭션으로 묶는 작업 단위.
            token_service: JWT 발급/검증 서비스.
            clock: 현재 시각을 반환하는 함수.
            max_login_attempts: 계정이 잠기기까지 허용하는 연속 실패 횟수.
            lockout_minutes: 잠금 유지 시간(분).
        """
        self.user_repo = user_repo
        self.role_repo = role_repo
        self.unit_of_work = unit_of_work
        self.token_service = token_service
        self.clock = clock
        self.max_login_attempts = max_login_attempts or config.MAX_LOGIN_ATTEMPTS
        self.lockout_minutes = lockout_minutes or config.LOCKOUT_MINUTES

    def register(self, first_name: str, last_name: str, email: str, password: str,
                 phone_number: Optional[str] = None) -> Dict[str, Any]:
        """
        새 사용자를 생성하고 Buyer 역할을 부여한 뒤 토큰을 발급합니다.

        사용자 행을 먼저 flush하여 ID를 얻고, 그 ID로 역할 할당 행을 추가합니다.
        두 쓰기는 하나의 트랜잭션으로 커밋됩니다.

        Raises:
            ValueError: 필수 값이 없거나 문자열이 아닐 때.
            EmailAlreadyExistsError: 이미 가입된 이메일일 때.
        """
        first_name = require_text(first_name, "firstName")
        last_name = require_text(last_name, "lastName")
        email = require_text(email, "email").lower()
        require_text(password, "password")
        phone_number = optional_text(phone_number, "phoneNumber")

        if self.user_repo.exists_by_email(email):
            raise EmailAlreadyExistsError(f"User with email '{email}' already exists.")

        with self.unit_of_work.transaction():
            user = self.user_repo.create(models.User(
                first_name=first_name,
                last_name=last_name,
                email=email,
                password_hash=hash_password(password),
                phone_number=phone_number,
                is_active=True,
                login_attempt_count=0,
                created_at=self.clock(),
            ))
            buyer_role = self.role_repo.find_by_name(models.BUYER)
            if buyer_role is None:
                logger.warning("Role '%s' missing; creating it.", models.BUYER)
                buyer_role = self.role_repo.create(models.Role(
                    name=models.BUYER,
                    description="Can browse products, place orders, and manage personal account",
                    is_active=True,
                ))
            self.user_repo.add_role_assignment(user.id, buyer_role.id)

        logger.info("User %s registered.", user.id)
        return self._auth_response(user.id)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        자격 증명을 검증하고 토큰을 발급합니다.

        비밀번호가 틀리면 실패 횟수를 저장하고, 한도에 도달하면 계정을 일정 시간 잠급니다.

        Raises:
            AuthenticationError: 이메일 또는 비밀번호가 틀렸을 때.
            AccountLockedError: 계정이 잠겨 있을 때.
            ValueError: 이메일 또는 비밀번호가 문자열이 아닐 때.
        """
        email = require_text(email, "email").lower()
        require_text(password, "password")

        user = self.user_repo.find_by_email(email)
        if not user:
            raise AuthenticationError("Invalid email or password.")

        now = self.clock()
        if user.locked_until and user.locked_until > now:
            raise AccountLockedError("Account is locked. Please try again later.")

        if not verify_password(password, user.password_hash):
            with self.unit_of_work.transaction():
                user.login_attempt_count = (user.login_attempt_count or 0) + 1
                if user.login_attempt_count >= self.max_login_attempts:
                    user.locked_until = now + timedelta(minutes=self.lockout_minutes)
                    logger.warning("User %s locked until %s.", user.id, user.locked_until.isoformat())
                self.user_repo.update(user)
            raise AuthenticationError("Invalid email or password.")

        with self.unit_of_work.transaction():
            user.login_attempt_count = 0
            user.locked_until = None
            user.last_login_at = now
            self.user_repo.update(user)

        return self._auth_response(user.id)

    def validate_token(self, token: str) -> Dict[str, Any]:
        """토큰을 검증하고 토큰 데이터(user_id, email, roles)를 반환합니다."""
        return self.token_service.decode(token)

    def _auth_response(self, user_id: int) -> Dict[str, Any]:
        user = self.user_repo.find_by_id(user_id)
        roles = [role.name for role in self.user_repo.get_effective_roles(user_id)]
        token = self.token_service.issue(user.id, user.email, roles)
        return {**token, "user": user_to_dict(user)}
