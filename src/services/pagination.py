import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")
U = TypeVar("U")

DEFAULT_PAGE_NUMBER = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
# DB가 받을 수 있는 최대 OFFSET (부호 있는 64비트 정수)
MAX_OFFSET = 2 ** 63 - 1


@dataclass(frozen=True)
class PageRequest:
    """
    1부터 시작하는 페이지 요청. 범위를 벗어난 값은 거부하지 않고 보정합니다.
    - page_number < 1 → 1
    - page_size < 1 → 10, page_size > 100 → 100
    - offset이 MAX_OFFSET을 넘지 않도록 page_number 상한을 둡니다. (빈 페이지 반환)
    """
    page_number: int = DEFAULT_PAGE_NUMBER
    page_size: int = DEFAULT_PAGE_SIZE

    @classmethod
    def of(cls, page_number: Optional[int] = None, page_size: Optional[int] = None) -> "PageRequest":
        if page_number is None or page_number < 1:
            page_number = DEFAULT_PAGE_NUMBER
        if page_size is None or page_size < 1:
            page_size = DEFAULT_PAGE_SIZE
        elif page_size > MAX_PAGE_SIZE:
            page_size = MAX_PAGE_SIZE
        page_number = min(page_number, MAX_OFFSET // page_size + 1)
        return cls(page_number=page_number, page_size=page_size)

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


@dataclass(frozen=True)
class PagedMetadata:
    total_count: int
    page_number: int
    page_size: int
    total_pages: int = field(init=False)
    has_previous: bool = field(init=False)
    has_next: bool = field(init=False)

    def __post_init__(self):
        total_pages = math.ceil(self.total_count / self.page_size)
        object.__setattr__(self, "total_pages", total_pages)
        object.__setattr__(self, "has_previous", self.page_number > 1)
        object.__setattr__(self, "has_next", self.page_number < total_pages)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_count": self.total_count,
            "page_number": self.page_number,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
            "has_previous": self.has_previous,
            "has_next": self.has_next,
        }


@dataclass(frozen=True)
class PagedResult(Generic[T]):
    items: List[T]
    metadata: PagedMetadata

    def map(self, fn: Callable[[T], U]) -> "PagedResult[U]":
        """메타데이터는 그대로 두고 항목만 변환합니다. (엔티티 → 응답 DTO)"""
        return PagedResult(items=[fn(item) for item in self.items], metadata=self.metadata)

    def to_dict(self) -> Dict[str, Any]:
        return {"items": list(self.items), "metadata": self.metadata.to_dict()}
