from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from ..database import Base
from src.utils.time_utils import utcnow

class Role(Base):
    """
    사용자가 가질 수 있는 권한의 집합을 정의합니다.
    (예: 'Super Admin', 'Seller', 'Buyer').
    RBAC(역할 기반 접근 제어)의 핵심 요소입니다.
    """
    __tablename__ = "roles"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False)
    description = Column(String(255))
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime)
    is_active = Column(Boolean, nullable=False, default=True)

    user_roles = relationship("UserRole", back_populates="role")


# 기본 역할 이름 (db_init에서 시드 데이터로 생성)
SUPER_ADMIN = "Super Admin"
SELLER = "Seller"
BUYER = "Buyer"

DEFAULT_ROLES = [
    (1, SUPER_ADMIN, "Full system access with all administrative privileges"),
    (2, SELLER, "Can create and manage products, view orders, manage inventory"),
    (3, BUYER, "Can browse products, place orders, and manage personal account"),
]
