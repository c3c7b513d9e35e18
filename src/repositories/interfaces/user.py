import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from datetime import datetime
from typing import List, Optional, Tuple
from src.database import models


class UserSortBy(enum.Enum):
    """사용자 목록 정렬에 허용된 필드 (화이트리스트)."""
    FirstName = "first_name"
    LastName = "last_name"
    Email = "email"
    CreatedAt = "created_at"
    LastLoginAt = "last_login_at"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["UserSortBy"]:
        """
        쿼리 문자열의 정렬 키를 대소문자 구분 없이 enum 멤버로 변환합니다.
        알 수 없는 값이나 빈 값은 None(기본 정렬)으로 처리합니다.
        """
        if raw is None or not str(raw).strip():
            return None
        wanted = str(raw).strip().lower()
        for member in cls:
            if member.name.lower() == wanted:
                return member
        return None


@dataclass(frozen=True)
class UserFilter:
    """
    사용자 목록 필터. 문자열 필드는 부분 일치(대소문자 무시),
    is_active / is_locked 는 정확히 일치해야 합니다.
    """
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    is_active: Optional[bool] = None
    role_name: Optional[str] = None
    is_locked: Optional[bool] = None

    @classmethod
    def from_params(cls, **params) -> Optional["UserFilter"]:
        """공백 문자열은 없는 값으로 취급하며, 모든 값이 비어 있으면 None을 반환합니다."""
        cleaned = {}
        for f in fields(cls):
            value = params.get(f.name)
            if isinstance(value, str):
                value = value.strip() or None
            cleaned[f.name] = value
        if all(v is None for v in cleaned.values()):
            return None
        return cls(**cleaned)


class IUserRepository(ABC):
    @abstractmethod
    def create(self, user_model: models.User) -> models.User:
        """새로운 사용자를 세션에 추가하고 flush하여 ID를 할당받습니다. (커밋하지 않음)"""
        pass

    @abstractmethod
    def find_by_id(self, user_id: int) -> Optional[models.User]:
        """고유 ID로 활성 사용자를 조회합니다. 역할 할당 정보도 함께 로드합니다."""
        pass

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[models.User]:
        """이메일로 활성 사용자를 조회합니다."""
        pass

    @abstractmethod
    def exists_by_email(self, email: str, exclude_user_id: Optional[int] = None) -> bool:
        """
        해당 이메일을 사용하는 사용자 행이 있는지 확인합니다. (비활성 사용자 포함)

        Args:
            email: 확인할 이메일 (소문자로 정규화된 값).
            exclude_user_id: 검사에서 제외할 사용자 ID (자기 자신의 이메일 유지 시).
        """
        pass

    @abstractmethod
    def update(self, user: models.User) -> models.User:
        """변경된 사용자 정보를 반영하고 updated_at을 갱신합니다. (커밋하지 않음)"""
        pass

    @abstractmethod
    def get_paged(
        self,
        offset: int,
        limit: int,
        user_filter: Optional[UserFilter] = None,
        sort_by: Optional[UserSortBy] = None,
        sort_descending: bool = False,
        now: Optional[datetime] = None,
    ) -> Tuple[List[models.User], int]:
        """
        필터와 정렬을 적용한 사용자 한 페이지와, 페이지네이션 이전의 전체 개수를 반환합니다.

        Args:
            offset: 건너뛸 행 수.
            limit: 가져올 최대 행 수.
            user_filter: 적용할 필터. None이면 전체.
            sort_by: 정렬 필드. None이면 ID 오름차순.
            sort_descending: 내림차순 여부.
            now: is_locked 필터의 기준 시각.

        Returns:
            (사용자 목록, 필터 적용 후 전체 개수) 튜플.
        """
        pass

    @abstractmethod
    def list_role_assignments(self, user_id: int) -> List[models.UserRole]:
        """사용자의 모든 역할 할당 행을 조회합니다. (비활성 행 포함)"""
        pass

    @abstractmethod
    def add_role_assignment(self, user_id: int, role_id: int) -> models.UserRole:
        """새로운 활성 역할 할당 행을 추가합니다."""
        pass

    @abstractmethod
    def set_role_assignment_active(self, user_id: int, role_id: int, is_active: bool) -> Optional[models.UserRole]:
        """기존 역할 할당 행의 활성 상태를 바꾸고 updated_at을 갱신합니다."""
        pass

    @abstractmethod
    def get_effective_roles(self, user_id: int) -> List[models.Role]:
        """할당과 역할이 모두 활성인 역할 목록을 조회합니다."""
        pass

    @abstractmethod
    def update_status(self, user_id: int, is_active: bool) -> Optional[models.User]:
        """사용자의 is_active와 updated_at만 변경합니다. (소프트 삭제)"""
        pass
