from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from src.database import models
from src.repositories.interfaces import IRoleRepository

class SqlalchemyRoleRepository(IRoleRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def find_by_id(self, role_id: int) -> Optional[models.Role]:
        return self.db.query(models.Role).filter(
            models.Role.id == role_id,
            models.Role.is_active.is_(True)
        ).first()

    def find_by_ids(self, role_ids: Iterable[int]) -> List[models.Role]:
        ids = set(role_ids)
        if not ids:
            return []
        return self.db.query(models.Role).filter(
            models.Role.id.in_(ids),
            models.Role.is_active.is_(True)
        ).all()

    def find_by_name(self, name: str) -> Optional[models.Role]:
        return self.db.query(models.Role).filter(
            models.Role.name == name,
            models.Role.is_active.is_(True)
        ).first()

    def create(self, role_model: models.Role) -> models.Role:
        self.db.add(role_model)
        self.db.flush()
        return role_model

    def list_all(self) -> List[models.Role]:
        return self.db.query(models.Role).filter(models.Role.is_active.is_(True)).order_by(models.Role.id.asc()).all()
