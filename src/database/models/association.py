from sqlalchemy import Boolean, Column, DateTime, Integer, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base
from src.utils.time_utils import utcnow

class UserRole(Base):
    """
    사용자(User)와 역할(Role) 사이의 다대다(many-to-many) 관계를 연결하는
    연관 테이블(Association Table) 모델입니다.
    할당 이력을 보존하기 위해 행을 삭제하지 않고 is_active 플래그로만 회수/재부여합니다.
    (user_id, role_id) 쌍은 항상 하나의 행만 존재합니다.
    """
    __tablename__ = 'user_roles'
    user_id = Column(Integer, ForeignKey('users.id'), primary_key=True)
    role_id = Column(Integer, ForeignKey('roles.id'), primary_key=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime)

    user = relationship("User", back_populates="user_roles")
    role = relationship("Role", back_populates="user_roles")
