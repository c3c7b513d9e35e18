from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from ..database import Base
from src.utils.time_utils import utcnow

class User(Base):
    """
    시스템에 가입한 사용자(구매자, 판매자, 관리자)를 나타냅니다.
    이메일은 소문자로 정규화하여 저장하므로 대소문자 구분 없이 유일합니다.
    사용자는 물리적으로 삭제되지 않고 is_active 플래그로 비활성화됩니다.
    """
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(256), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    phone_number = Column(String(20))

    # 보안 상태
    email_verified_at = Column(DateTime)
    last_login_at = Column(DateTime)
    login_attempt_count = Column(Integer, nullable=False, default=0)
    locked_until = Column(DateTime)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime)
    is_active = Column(Boolean, nullable=False, default=True)

    user_roles = relationship("UserRole", back_populates="user")
    products = relationship("Product", back_populates="seller")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def effective_role_names(self):
        """활성 역할 할당 중, 참조하는 역할도 활성인 것의 이름 목록."""
        return [
            ur.role.name for ur in self.user_roles
            if ur.is_active and ur.role is not None and ur.role.is_active
        ]
