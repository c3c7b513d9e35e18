from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from ..database import Base
from src.utils.time_utils import utcnow

class Category(Base):
    """
    상품을 묶는 카탈로그 분류입니다. (예: 'Electronics').
    Super Admin만 생성/수정/삭제할 수 있습니다.
    """
    __tablename__ = "categories"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(String(255))
    image_path = Column(String(500))
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime)
    is_active = Column(Boolean, nullable=False, default=True)

    products = relationship("Product", back_populates="category")
