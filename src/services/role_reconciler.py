import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, NamedTuple

from src.repositories.interfaces import IRoleRepository
from src.services.exceptions import RoleNotFoundError

logger = logging.getLogger(__name__)


class RoleAssignmentState(NamedTuple):
    """기존 역할 할당 행의 (role_id, is_active) 요약."""
    role_id: int
    is_active: bool


@dataclass(frozen=True)
class RoleChangeSet:
    """활성 역할 집합을 목표 집합으로 바꾸기 위한 최소 변경 목록."""
    to_deactivate: FrozenSet[int]
    to_reactivate: FrozenSet[int]
    to_create: FrozenSet[int]

    @property
    def is_empty(self) -> bool:
        return not (self.to_deactivate or self.to_reactivate or self.to_create)


def compute_role_changes(existing: Iterable, desired_role_ids: Iterable[int]) -> RoleChangeSet:
    """
    기존 할당 행과 목표 역할 ID 집합의 차이를 계산합니다. (순수 함수)

    비활성 행이 있는 역할은 새 행을 만들지 않고 재활성화 대상으로 분류하므로
    (user_id, role_id) 쌍의 유일성이 유지됩니다.

    Args:
        existing: role_id / is_active 속성을 가진 객체들 (UserRole 또는 RoleAssignmentState).
        desired_role_ids: 최종적으로 활성 상태여야 하는 역할 ID들.
    """
    desired = frozenset(desired_role_ids)
    existing = list(existing)
    current_active = frozenset(a.role_id for a in existing if a.is_active)
    inactive_rows = frozenset(a.role_id for a in existing if not a.is_active) - current_active
    any_row = frozenset(a.role_id for a in existing)

    return RoleChangeSet(
        to_deactivate=current_active - desired,
        to_reactivate=desired & inactive_rows,
        to_create=desired - current_active - any_row,
    )


class RoleReconciler:
    def __init__(self, role_repo: IRoleRepository):
        self.role_repo = role_repo

    def reconcile(self, existing: Iterable, desired_role_ids: Iterable[int]) -> RoleChangeSet:
        """
        목표 역할 ID가 모두 존재하는지 먼저 검증한 뒤 변경 목록을 계산합니다.

        Raises:
            RoleNotFoundError: 존재하지 않거나 비활성인 역할 ID가 하나라도 포함되었을 때.
                이 경우 어떤 변경도 계산/적용되지 않습니다.
        """
        desired = frozenset(desired_role_ids)
        found = {role.id for role in self.role_repo.find_by_ids(desired)}
        missing = sorted(desired - found)
        if missing:
            raise RoleNotFoundError(f"Role with id '{missing[0]}' not found.")

        changes = compute_role_changes(existing, desired)
        logger.debug(
            "Role changes: deactivate=%s reactivate=%s create=%s",
            sorted(changes.to_deactivate), sorted(changes.to_reactivate), sorted(changes.to_create)
        )
        return changes
