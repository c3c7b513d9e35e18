import logging
from datetime import datetime
from typing import Callable, Optional, Union

from src.database import models
from src.repositories.interfaces import IUserRepository, UserFilter, UserSortBy
from src.services.pagination import PageRequest, PagedMetadata, PagedResult
from src.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

__all__ = ["UserQueryEngine", "UserFilter", "UserSortBy"]


class UserQueryEngine:
    """필터링/정렬/페이지네이션을 적용한 사용자 목록 조회를 담당합니다."""

    def __init__(self, user_repo: IUserRepository, clock: Callable[[], datetime] = utcnow):
        """
        Args:
            user_repo: 사용자 데이터에 접근하기 위한 리포지토리.
            clock: is_locked 필터의 기준 시각을 반환하는 함수. 테스트에서 고정 시각을 주입합니다.
        """
        self.user_repo = user_repo
        self.clock = clock

    def query(
        self,
        page_number: Optional[int] = None,
        page_size: Optional[int] = None,
        user_filter: Optional[UserFilter] = None,
        sort_by: Union[UserSortBy, str, None] = None,
        sort_descending: bool = False,
    ) -> PagedResult[models.User]:
        """
        조건에 맞는 사용자 한 페이지와 페이지 메타데이터를 반환합니다.

        페이지 번호/크기는 보정되고, 알 수 없는 정렬 키는 ID 순 정렬로 대체됩니다.
        어떤 필터/정렬 조합도 예외를 발생시키지 않습니다.

        Args:
            page_number: 1부터 시작하는 페이지 번호.
            page_size: 페이지 크기 (1~100).
            user_filter: 적용할 필터. None이면 전체 사용자.
            sort_by: 정렬 필드. 문자열이면 UserSortBy 화이트리스트로 검증합니다.
            sort_descending: 내림차순 여부.

        Returns:
            User 엔티티 목록과 PagedMetadata를 담은 PagedResult.
        """
        page = PageRequest.of(page_number, page_size)
        if not isinstance(sort_by, UserSortBy):
            sort_by = UserSortBy.parse(sort_by)

        items, total_count = self.user_repo.get_paged(
            offset=page.offset,
            limit=page.limit,
            user_filter=user_filter,
            sort_by=sort_by,
            sort_descending=bool(sort_descending),
            now=self.clock(),
        )
        logger.debug("User query page=%s size=%s total=%s", page.page_number, page.page_size, total_count)
        return PagedResult(
            items=list(items),
            metadata=PagedMetadata(total_count, page.page_number, page.page_size),
        )
