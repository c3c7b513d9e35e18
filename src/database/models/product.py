from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base
from src.utils.time_utils import utcnow

class Product(Base):
    """
    판매자(Seller)가 등록하는 상품입니다.
    하나의 카테고리에 속하며, 등록한 판매자만 수정/삭제할 수 있습니다. (Super Admin 제외)
    """
    __tablename__ = "products"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), unique=True, nullable=False, index=True)
    description = Column(String(1000))
    price = Column(Numeric(18, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    image_path = Column(String(500))
    sku = Column(String(100))
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime)
    is_active = Column(Boolean, nullable=False, default=True)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    category = relationship("Category", back_populates="products")
    seller = relationship("User", back_populates="products")
