# tests/repositories/test_sqlalchemy_user_repository.py
from datetime import datetime, timedelta

import pytest

from src.database import models
from src.repositories.interfaces import UserFilter, UserSortBy
from src.repositories.sqlalchemy.sqlalchemy_user_repository import SqlalchemyUserRepository
from src.services.user_query import UserQueryEngine

NOW = datetime(2026, 3, 1, 12, 0, 0)

@pytest.fixture
def user_repo(db_session) -> SqlalchemyUserRepository:
    return SqlalchemyUserRepository(db_session)

@pytest.fixture
def query_engine(user_repo) -> UserQueryEngine:
    return UserQueryEngine(user_repo, clock=lambda: NOW)

def emails(result):
    return [u.email for u in result.items]

# ===================================================================
#  페이지네이션
# ===================================================================
class TestPaging:
    def test_25_users_in_pages_of_10(self, db_session, user_factory, query_engine):
        # === Arrange ===
        for i in range(1, 26):
            user_factory(i)

        # === Act ===
        first = query_engine.query(page_number=1, page_size=10)
        last = query_engine.query(page_number=3, page_size=10)

        # === Assert ===
        assert len(first.items) == 10
        assert first.metadata.total_count == 25
        assert first.metadata.total_pages == 3
        assert first.metadata.has_next is True
        assert first.metadata.has_previous is False
        assert emails(first)[0] == "user01@example.com"

        assert len(last.items) == 5
        assert last.metadata.has_next is False
        assert last.metadata.has_previous is True
        assert emails(last) == [f"user{i:02d}@example.com" for i in range(21, 26)]

    def test_page_past_the_end_keeps_total(self, db_session, user_factory, query_engine):
        for i in range(1, 4):
            user_factory(i)

        result = query_engine.query(page_number=5, page_size=2)

        assert result.items == []
        assert result.metadata.total_count == 3
        assert result.metadata.total_pages == 2

    def test_huge_page_number_returns_empty_page(self, db_session, user_factory, query_engine):
        for i in range(1, 4):
            user_factory(i)

        result = query_engine.query(page_number=10 ** 18, page_size=100)

        assert result.items == []
        assert result.metadata.total_count == 3
        assert result.metadata.has_next is False
        assert result.metadata.has_previous is True

    def test_out_of_range_page_values_are_clamped(self, db_session, user_factory, query_engine):
        for i in range(1, 4):
            user_factory(i)

        result = query_engine.query(page_number=-3, page_size=0)

        assert result.metadata.page_number == 1
        assert result.metadata.page_size == 10
        assert len(result.items) == 3

# ===================================================================
#  필터링
# ===================================================================
class TestFiltering:
    def test_substring_filters_are_case_insensitive(self, db_session, user_factory, query_engine):
        user_factory(1, first_name="Minji")
        user_factory(2, first_name="Jimin")
        user_factory(3, first_name="Sora")

        result = query_engine.query(user_filter=UserFilter(first_name="MIN"))

        assert emails(result) == ["user01@example.com", "user02@example.com"]

    def test_wildcards_in_filter_are_literal(self, db_session, user_factory, query_engine):
        user_factory(1, last_name="Sale50%")
        user_factory(2, last_name="Sale500")

        result = query_engine.query(user_filter=UserFilter(last_name="50%"))

        assert emails(result) == ["user01@example.com"]

    def test_filters_are_combined(self, db_session, user_factory, query_engine):
        user_factory(1, email="alpha@shop.com", is_active=True)
        user_factory(2, email="alpha@other.com", is_active=False)
        user_factory(3, email="beta@shop.com", is_active=False)

        result = query_engine.query(user_filter=UserFilter(email="alpha", is_active=False))

        assert emails(result) == ["alpha@other.com"]

    def test_phone_filter_skips_users_without_phone(self, db_session, user_factory, query_engine):
        user_factory(1, phone_number=None)
        user_factory(2, phone_number="010-9999-0002")

        result = query_engine.query(user_filter=UserFilter(phone_number="9999"))

        assert emails(result) == ["user02@example.com"]

    def test_role_name_matches_only_effective_roles(self, db_session, user_factory, seeded_roles, query_engine):
        # === Arrange ===
        active_seller = user_factory(1)
        revoked_seller = user_factory(2)
        buyer = user_factory(3)
        db_session.add_all([
            models.UserRole(user_id=active_seller.id, role_id=2, is_active=True),
            models.UserRole(user_id=revoked_seller.id, role_id=2, is_active=False),
            models.UserRole(user_id=buyer.id, role_id=3, is_active=True),
        ])
        db_session.flush()

        # === Act ===
        result = query_engine.query(user_filter=UserFilter(role_name="SELL"))

        # === Assert ===
        assert emails(result) == ["user01@example.com"]

    def test_is_locked_uses_evaluation_time(self, db_session, user_factory, query_engine):
        user_factory(1, locked_until=NOW + timedelta(minutes=10))
        user_factory(2, locked_until=NOW - timedelta(minutes=1))
        user_factory(3, locked_until=None)

        locked = query_engine.query(user_filter=UserFilter(is_locked=True))
        unlocked = query_engine.query(user_filter=UserFilter(is_locked=False))

        # 만료된 잠금(1분 전)은 잠긴 것으로 보지 않음
        assert emails(locked) == ["user01@example.com"]
        assert emails(unlocked) == ["user02@example.com", "user03@example.com"]

    def test_same_query_twice_returns_same_page(self, db_session, user_factory, query_engine):
        for i in range(1, 13):
            user_factory(i, last_name="Even" if i % 2 == 0 else "Odd")
        user_filter = UserFilter(last_name="even")

        first = query_engine.query(2, 3, user_filter, "Email", True)
        second = query_engine.query(2, 3, user_filter, "Email", True)

        assert emails(first) == emails(second)
        assert first.metadata == second.metadata
        assert first.metadata.total_count == 6

# ===================================================================
#  정렬
# ===================================================================
class TestSorting:
    @pytest.fixture
    def login_users(self, user_factory):
        user_factory(1, last_login_at=datetime(2026, 2, 1))
        user_factory(2, last_login_at=None)
        user_factory(3, last_login_at=datetime(2026, 1, 1))
        user_factory(4, last_login_at=None)

    def test_nulls_first_when_ascending(self, login_users, query_engine):
        result = query_engine.query(sort_by=UserSortBy.LastLoginAt)

        assert emails(result) == [
            "user02@example.com", "user04@example.com", "user03@example.com", "user01@example.com"
        ]

    def test_nulls_last_when_descending(self, login_users, query_engine):
        result = query_engine.query(sort_by=UserSortBy.LastLoginAt, sort_descending=True)

        # 동률(NULL)은 ID 오름차순
        assert emails(result) == [
            "user01@example.com", "user03@example.com", "user02@example.com", "user04@example.com"
        ]

    def test_unknown_sort_key_orders_by_id(self, db_session, user_factory, query_engine):
        user_factory(1, first_name="Zed")
        user_factory(2, first_name="Amy")

        result = query_engine.query(sort_by="password_hash", sort_descending=True)

        assert emails(result) == ["user01@example.com", "user02@example.com"]

    def test_sort_by_first_name_descending(self, db_session, user_factory, query_engine):
        user_factory(1, first_name="Amy")
        user_factory(2, first_name="Zed")
        user_factory(3, first_name="Kim")

        result = query_engine.query(sort_by="firstName", sort_descending=True)

        assert [u.first_name for u in result.items] == ["Zed", "Kim", "Amy"]

# ===================================================================
#  단건 조회 / 역할 할당
# ===================================================================
class TestLookupsAndAssignments:
    def test_find_by_id_ignores_deactivated_user(self, db_session, user_factory, user_repo):
        user = user_factory(1, is_active=False)

        assert user_repo.find_by_id(user.id) is None

    def test_exists_by_email_counts_inactive_rows(self, db_session, user_factory, user_repo):
        user_factory(1, is_active=False)
        other = user_factory(2)

        assert user_repo.exists_by_email("user01@example.com") is True
        assert user_repo.exists_by_email("user02@example.com", exclude_user_id=other.id) is False

    def test_effective_roles_require_active_role(self, db_session, user_factory, seeded_roles, user_repo):
        user = user_factory(1)
        user_repo.add_role_assignment(user.id, 2)
        user_repo.add_role_assignment(user.id, 3)
        seeded_roles[models.BUYER].is_active = False
        db_session.flush()

        assert [r.name for r in user_repo.get_effective_roles(user.id)] == [models.SELLER]

    def test_update_status_soft_deletes(self, db_session, user_factory, user_repo):
        user = user_factory(1)

        user_repo.update_status(user.id, False)

        assert db_session.get(models.User, user.id).is_active is False
        assert db_session.query(models.User).count() == 1
