from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from src.database import models
from src.repositories.interfaces import ICategoryRepository
from src.utils.time_utils import utcnow

class SqlalchemyCategoryRepository(ICategoryRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, category_model: models.Category) -> models.Category:
        self.db.add(category_model)
        self.db.flush()
        return category_model

    def find_by_id(self, category_id: int) -> Optional[models.Category]:
        return self.db.query(models.Category).filter(
            models.Category.id == category_id,
            models.Category.is_active.is_(True)
        ).first()

    def exists_by_name(self, name: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(models.Category.id).filter(func.lower(models.Category.name) == name.lower())
        if exclude_id is not None:
            query = query.filter(models.Category.id != exclude_id)
        return query.first() is not None

    def list_all(self) -> List[models.Category]:
        return self.db.query(models.Category).filter(
            models.Category.is_active.is_(True)
        ).order_by(models.Category.name.asc()).all()

    def update(self, category: models.Category) -> models.Category:
        category.updated_at = utcnow()
        self.db.flush()
        return category

    def count_active_products(self, category_id: int) -> int:
        return self.db.query(models.Product).filter(
            models.Product.category_id == category_id,
            models.Product.is_active.is_(True)
        ).count()
