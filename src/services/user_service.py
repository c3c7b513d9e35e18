import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from src.repositories.interfaces import IUnitOfWork, IUserRepository, IRoleRepository, UserFilter
from src.services.dto import user_to_dict, role_to_dict
from src.services.exceptions import UserNotFoundError, EmailAlreadyExistsError
from src.services.role_reconciler import RoleReconciler
from src.services.user_query import UserQueryEngine
from src.services.validation import optional_bool, optional_text, require_text
from src.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

class UserService:
    """관리자용 사용자 조회/수정/역할 변경/비활성화 서비스를 제공합니다."""

    def __init__(self, user_repo: IUserRepository, role_repo: IRoleRepository, unit_of_work: IUnitOfWork,
                 clock: Callable[[], datetime] = utcnow):
        """
        UserService를 초기화합니다.

        Args:
            user_repo: 사용자 데이터에 접근하기 위한 리포지토리.
            role_repo: 역할 존재 여부 검증에 사용하는 리포지토리.
            unit_of_work: 변경 작업을 하나의 트랜잭션으로 묶는 작업 단위.
            clock: 잠금 여부 판단 기준 시각.
        """
        self.user_repo = user_repo
        self.role_repo = role_repo
        self.unit_of_work = unit_of_work
        self.query_engine = UserQueryEngine(user_repo, clock)
        self.role_reconciler = RoleReconciler(role_repo)

    def list_users(self, page_number: Optional[int] = None, page_size: Optional[int] = None,
                   user_filter: Optional[UserFilter] = None, sort_by: Optional[str] = None,
                   sort_descending: bool = False) -> Dict[str, Any]:
        """필터/정렬/페이지네이션이 적용된 사용자 목록과 메타데이터를 반환합니다."""
        result = self.query_engine.query(page_number, page_size, user_filter, sort_by, sort_descending)
        return result.map(user_to_dict).to_dict()

    def get_user(self, user_id: int) -> Dict[str, Any]:
        """
        ID로 활성 사용자를 조회합니다.

        Raises:
            UserNotFoundError: 해당 ID의 사용자가 없거나 비활성일 때.
        """
        user = self.user_repo.find_by_id(user_id)
        if not user:
            raise UserNotFoundError(f"User with id '{user_id}' not found.")
        return user_to_dict(user)

    def update_user(self, user_id: int, first_name: str, last_name: str, email: Optional[str] = None,
                    phone_number: Optional[str] = None, is_active: Optional[bool] = None) -> Dict[str, Any]:
        """
        사용자 기본 정보를 수정합니다. 이메일은 소문자로 정규화됩니다.

        Raises:
            UserNotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
            EmailAlreadyExistsError: 변경하려는 이메일을 다른 사용자가 사용 중일 때.
            ValueError: 이름이 비어 있거나, 필드 타입이 맞지 않을 때.
        """
        first_name = require_text(first_name, "firstName")
        last_name = require_text(last_name, "lastName")
        new_email = optional_text(email, "email")
        new_email = new_email.lower() if new_email else None
        phone_number = optional_text(phone_number, "phoneNumber")
        is_active = optional_bool(is_active, "isActive")

        user = self.user_repo.find_by_id(user_id)
        if not user:
            raise UserNotFoundError(f"User with id '{user_id}' not found.")

        if new_email and new_email != user.email:
            if self.user_repo.exists_by_email(new_email, exclude_user_id=user_id):
                raise EmailAlreadyExistsError(f"Email '{new_email}' is already taken by another user.")

        with self.unit_of_work.transaction():
            user.first_name = first_name
            user.last_name = last_name
            if new_email:
                user.email = new_email
            user.phone_number = phone_number
            if is_active is not None:
                user.is_active = is_active
            self.user_repo.update(user)

        logger.info("User %s updated.", user_id)
        return user_to_dict(user)

    def update_roles(self, user_id: int, role_ids: Iterable[int]) -> Dict[str, Any]:
        """
        사용자의 활성 역할 집합을 role_ids로 맞춥니다.

        회수된 역할은 행을 삭제하지 않고 비활성화하며, 예전에 회수된 역할을 다시 부여하면
        기존 행을 재활성화합니다. 모든 변경은 하나의 트랜잭션으로 적용됩니다.

        Raises:
            UserNotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
            RoleNotFoundError: 존재하지 않는 역할 ID가 포함되었을 때. (아무것도 변경되지 않음)
            ValueError: role_ids에 정수가 아닌 값이 있을 때.
        """
        desired = self._normalize_role_ids(role_ids)

        user = self.user_repo.find_by_id(user_id)
        if not user:
            raise UserNotFoundError(f"User with id '{user_id}' not found.")

        existing = self.user_repo.list_role_assignments(user_id)
        changes = self.role_reconciler.reconcile(existing, desired)

        if not changes.is_empty:
            with self.unit_of_work.transaction():
                for role_id in sorted(changes.to_deactivate):
                    self.user_repo.set_role_assignment_active(user_id, role_id, False)
                for role_id in sorted(changes.to_reactivate):
                    self.user_repo.set_role_assignment_active(user_id, role_id, True)
                for role_id in sorted(changes.to_create):
                    self.user_repo.add_role_assignment(user_id, role_id)
            logger.info(
                "Roles of user %s updated: -%s ~%s +%s", user_id,
                sorted(changes.to_deactivate), sorted(changes.to_reactivate), sorted(changes.to_create)
            )

        return self.get_user(user_id)

    def delete_user(self, user_id: int) -> Dict[str, Any]:
        """
        사용자를 비활성화합니다. (소프트 삭제, 행은 남아 있음)

        Raises:
            UserNotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
        """
        user = self.user_repo.find_by_id(user_id)
        if not user:
            raise UserNotFoundError(f"User with id '{user_id}' not found.")

        with self.unit_of_work.transaction():
            self.user_repo.update_status(user_id, False)

        logger.info("User %s deactivated.", user_id)
        return user_to_dict(user)

    def list_roles(self) -> List[Dict[str, Any]]:
        """선택 가능한 활성 역할 목록을 조회합니다."""
        return [role_to_dict(r) for r in self.role_repo.list_all()]

    @staticmethod
    def _normalize_role_ids(role_ids: Iterable[int]) -> set:
        if role_ids is None:
            raise ValueError("roleIds is required.")
        normalized = set()
        for role_id in role_ids:
            if isinstance(role_id, bool) or not isinstance(role_id, int):
                raise ValueError(f"Invalid role id: {role_id!r}")
            normalized.add(role_id)
        return normalized
