# tests/services/test_role_reconciler.py
import pytest
from unittest.mock import MagicMock

from src.database import models
from src.repositories.interfaces import IRoleRepository
from src.services.exceptions import RoleNotFoundError
from src.services.role_reconciler import RoleAssignmentState, RoleReconciler, compute_role_changes

# ===================================================================
#  Fixture 설정
# ===================================================================

@pytest.fixture
def mock_role_repo() -> MagicMock:
    """IRoleRepository에 대한 모의 객체. 기본으로 ID 1~3 역할이 존재합니다."""
    repo = MagicMock(spec=IRoleRepository)
    repo.find_by_ids.side_effect = lambda ids: [
        models.Role(id=i, name=f"role{i}") for i in ids if i in (1, 2, 3)
    ]
    return repo

@pytest.fixture
def reconciler(mock_role_repo: MagicMock) -> RoleReconciler:
    return RoleReconciler(mock_role_repo)

# ===================================================================
#  compute_role_changes (순수 함수) 테스트
# ===================================================================
class TestComputeRoleChanges:
    def test_deactivate_reactivate_and_create(self):
        """활성 1, 비활성 2 상태에서 {2, 3}을 요청하면 1 비활성화, 2 재활성화, 3 생성."""
        existing = [RoleAssignmentState(1, True), RoleAssignmentState(2, False)]

        changes = compute_role_changes(existing, {2, 3})

        assert changes.to_deactivate == {1}
        assert changes.to_reactivate == {2}
        assert changes.to_create == {3}

    def test_same_set_is_no_op(self):
        existing = [RoleAssignmentState(1, True), RoleAssignmentState(3, True)]

        changes = compute_role_changes(existing, {1, 3})

        assert changes.is_empty

    def test_empty_desired_deactivates_all_active(self):
        existing = [RoleAssignmentState(1, True), RoleAssignmentState(2, False)]

        changes = compute_role_changes(existing, set())

        assert changes.to_deactivate == {1}
        assert not changes.to_reactivate
        assert not changes.to_create

    def test_inactive_row_not_desired_is_left_alone(self):
        existing = [RoleAssignmentState(2, False)]

        changes = compute_role_changes(existing, {1})

        assert changes.to_deactivate == frozenset()
        assert changes.to_create == {1}

    def test_accepts_user_role_entities(self):
        existing = [
            models.UserRole(user_id=7, role_id=1, is_active=True),
            models.UserRole(user_id=7, role_id=2, is_active=False),
        ]

        changes = compute_role_changes(existing, [2])

        assert changes.to_deactivate == {1}
        assert changes.to_reactivate == {2}
        assert changes.to_create == frozenset()

# ===================================================================
#  RoleReconciler (역할 존재 검증 포함) 테스트
# ===================================================================
class TestRoleReconciler:
    def test_reconcile_success(self, reconciler: RoleReconciler, mock_role_repo: MagicMock):
        # === Arrange ===
        existing = [RoleAssignmentState(1, True)]

        # === Act ===
        changes = reconciler.reconcile(existing, [1, 2])

        # === Assert ===
        assert changes.to_create == {2}
        mock_role_repo.find_by_ids.assert_called_once_with(frozenset({1, 2}))

    def test_unknown_role_fails_whole_call(self, reconciler: RoleReconciler):
        """존재하지 않는 역할 ID가 하나라도 있으면 RoleNotFoundError가 발생합니다."""
        existing = [RoleAssignmentState(1, True)]

        with pytest.raises(RoleNotFoundError, match="99"):
            reconciler.reconcile(existing, [2, 99])
