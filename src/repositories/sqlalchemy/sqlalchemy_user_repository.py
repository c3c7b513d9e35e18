from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, Query, selectinload
from src.database import models
from src.repositories.interfaces import IUserRepository, UserFilter, UserSortBy
from src.utils.time_utils import utcnow

# 정렬 키는 반드시 이 매핑을 거쳐 컬럼으로 변환됩니다. (문자열이 ORDER BY에 그대로 들어가지 않음)
_SORT_COLUMNS = {
    UserSortBy.FirstName: models.User.first_name,
    UserSortBy.LastName: models.User.last_name,
    UserSortBy.Email: models.User.email,
    UserSortBy.CreatedAt: models.User.created_at,
    UserSortBy.LastLoginAt: models.User.last_login_at,
}

class SqlalchemyUserRepository(IUserRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def _with_roles(self) -> Query:
        return self.db.query(models.User).options(
            selectinload(models.User.user_roles).selectinload(models.UserRole.role)
        )

    def create(self, user_model: models.User) -> models.User:
        self.db.add(user_model)
        self.db.flush()
        return user_model

    def find_by_id(self, user_id: int) -> Optional[models.User]:
        return self._with_roles().filter(
            models.User.id == user_id,
            models.User.is_active.is_(True)
        ).first()

    def find_by_email(self, email: str) -> Optional[models.User]:
        return self._with_roles().filter(
            models.User.email == email,
            models.User.is_active.is_(True)
        ).first()

    def exists_by_email(self, email: str, exclude_user_id: Optional[int] = None) -> bool:
        query = self.db.query(models.User.id).filter(models.User.email == email)
        if exclude_user_id is not None:
            query = query.filter(models.User.id != exclude_user_id)
        return query.first() is not None

    def update(self, user: models.User) -> models.User:
        user.updated_at = utcnow()
        self.db.flush()
        return user

    def get_paged(
        self,
        offset: int,
        limit: int,
        user_filter: Optional[UserFilter] = None,
        sort_by: Optional[UserSortBy] = None,
        sort_descending: bool = False,
        now: Optional[datetime] = None,
    ) -> Tuple[List[models.User], int]:
        query = self.db.query(models.User)
        if user_filter is not None:
            query = self._apply_filter(query, user_filter, now or utcnow())

        # 페이지네이션 전에 필터링된 전체 개수를 구합니다.
        total_count = query.count()

        items = (
            query.options(selectinload(models.User.user_roles).selectinload(models.UserRole.role))
            .order_by(*self._ordering(sort_by, sort_descending))
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total_count

    @staticmethod
    def _apply_filter(query: Query, f: UserFilter, now: datetime) -> Query:
        User = models.User
        if f.first_name:
            query = query.filter(User.first_name.icontains(f.first_name, autoescape=True))
        if f.last_name:
            query = query.filter(User.last_name.icontains(f.last_name, autoescape=True))
        if f.email:
            query = query.filter(User.email.icontains(f.email, autoescape=True))
        if f.phone_number:
            query = query.filter(
                User.phone_number.isnot(None),
                User.phone_number.icontains(f.phone_number, autoescape=True)
            )
        if f.is_active is not None:
            query = query.filter(User.is_active.is_(f.is_active))
        if f.role_name:
            query = query.filter(User.user_roles.any(and_(
                models.UserRole.is_active.is_(True),
                models.UserRole.role.has(and_(
                    models.Role.is_active.is_(True),
                    models.Role.name.icontains(f.role_name, autoescape=True)
                ))
            )))
        if f.is_locked is True:
            query = query.filter(User.locked_until.isnot(None), User.locked_until > now)
        elif f.is_locked is False:
            query = query.filter(or_(User.locked_until.is_(None), User.locked_until <= now))
        return query

    @staticmethod
    def _ordering(sort_by: Optional[UserSortBy], sort_descending: bool) -> list:
        column = _SORT_COLUMNS.get(sort_by)
        if column is None:
            return [models.User.id.asc()]
        # NULL은 최솟값으로 취급: 오름차순이면 맨 앞, 내림차순이면 맨 뒤
        if sort_descending:
            return [column.isnot(None).desc(), column.desc(), models.User.id.asc()]
        return [column.isnot(None).asc(), column.asc(), models.User.id.asc()]

    def list_role_assignments(self, user_id: int) -> List[models.UserRole]:
        return self.db.query(models.UserRole).filter(
            models.UserRole.user_id == user_id
        ).order_by(models.UserRole.role_id.asc()).all()

    def add_role_assignment(self, user_id: int, role_id: int) -> models.UserRole:
        assignment = models.UserRole(user_id=user_id, role_id=role_id, is_active=True, created_at=utcnow())
        self.db.add(assignment)
        self.db.flush()
        return assignment

    def set_role_assignment_active(self, user_id: int, role_id: int, is_active: bool) -> Optional[models.UserRole]:
        assignment = self.db.get(models.UserRole, (user_id, role_id))
        if assignment:
            assignment.is_active = is_active
            assignment.updated_at = utcnow()
            self.db.flush()
        return assignment

    def get_effective_roles(self, user_id: int) -> List[models.Role]:
        return self.db.query(models.Role).join(
            models.UserRole, models.UserRole.role_id == models.Role.id
        ).filter(
            models.UserRole.user_id == user_id,
            models.UserRole.is_active.is_(True),
            models.Role.is_active.is_(True)
        ).order_by(models.Role.id.asc()).all()

    def update_status(self, user_id: int, is_active: bool) -> Optional[models.User]:
        user = self.db.get(models.User, user_id)
        if user:
            user.is_active = is_active
            user.updated_at = utcnow()
            self.db.flush()
        return user
