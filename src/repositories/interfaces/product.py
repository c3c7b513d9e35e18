from abc import ABC, abstractmethod
from typing import List, Optional
from src.database import models

class IProductRepository(ABC):
    @abstractmethod
    def create(self, product_model: models.Product) -> models.Product:
        """새로운 상품을 세션에 추가하고 flush합니다."""
        pass

    @abstractmethod
    def find_by_id(self, product_id: int) -> Optional[models.Product]:
        """고유 ID로 활성 상품을 조회합니다."""
        pass

    @abstractmethod
    def exists_by_name(self, name: str, exclude_id: Optional[int] = None) -> bool:
        """같은 이름(대소문자 무시)의 상품이 있는지 확인합니다."""
        pass

    @abstractmethod
    def list_all(self) -> List[models.Product]:
        """모든 활성 상품을 최신순으로 조회합니다."""
        pass

    @abstractmethod
    def list_by_seller_id(self, seller_id: int) -> List[models.Product]:
        """특정 판매자의 활성 상품 목록을 조회합니다."""
        pass

    @abstractmethod
    def update(self, product: models.Product) -> models.Product:
        """변경 사항을 반영하고 updated_at을 갱신합니다."""
        pass
