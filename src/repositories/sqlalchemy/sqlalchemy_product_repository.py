from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload
from src.database import models
from src.repositories.interfaces import IProductRepository
from src.utils.time_utils import utcnow

class SqlalchemyProductRepository(IProductRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def _active(self):
        return self.db.query(models.Product).options(
            joinedload(models.Product.category), joinedload(models.Product.seller)
        ).filter(models.Product.is_active.is_(True))

    def create(self, product_model: models.Product) -> models.Product:
        self.db.add(product_model)
        self.db.flush()
        return product_model

    def find_by_id(self, product_id: int) -> Optional[models.Product]:
        return self._active().filter(models.Product.id == product_id).first()

    def exists_by_name(self, name: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(models.Product.id).filter(func.lower(models.Product.name) == name.lower())
        if exclude_id is not None:
            query = query.filter(models.Product.id != exclude_id)
        return query.first() is not None

    def list_all(self) -> List[models.Product]:
        return self._active().order_by(models.Product.created_at.desc(), models.Product.id.desc()).all()

    def list_by_seller_id(self, seller_id: int) -> List[models.Product]:
        return self._active().filter(
            models.Product.seller_id == seller_id
        ).order_by(models.Product.created_at.desc(), models.Product.id.desc()).all()

    def update(self, product: models.Product) -> models.Product:
        product.updated_at = utcnow()
        self.db.flush()
        return product
