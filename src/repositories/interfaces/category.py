from abc import ABC, abstractmethod
from typing import List, Optional
from src.database import models

class ICategoryRepository(ABC):
    @abstractmethod
    def create(self, category_model: models.Category) -> models.Category:
        """새로운 카테고리를 세션에 추가하고 flush합니다."""
        pass

    @abstractmethod
    def find_by_id(self, category_id: int) -> Optional[models.Category]:
        """고유 ID로 활성 카테고리를 조회합니다."""
        pass

    @abstractmethod
    def exists_by_name(self, name: str, exclude_id: Optional[int] = None) -> bool:
        """같은 이름(대소문자 무시)의 카테고리가 있는지 확인합니다."""
        pass

    @abstractmethod
    def list_all(self) -> List[models.Category]:
        """모든 활성 카테고리를 이름 순으로 조회합니다."""
        pass

    @abstractmethod
    def update(self, category: models.Category) -> models.Category:
        """변경 사항을 반영하고 updated_at을 갱신합니다."""
        pass

    @abstractmethod
    def count_active_products(self, category_id: int) -> int:
        """카테고리에 속한 활성 상품 개수를 조회합니다."""
        pass
