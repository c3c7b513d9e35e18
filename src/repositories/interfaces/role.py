from abc import ABC, abstractmethod
from typing import Iterable, List, Optional
from src.database import models

class IRoleRepository(ABC):
    @abstractmethod
    def find_by_id(self, role_id: int) -> Optional[models.Role]:
        """고유 ID로 활성 역할을 조회합니다."""
        pass

    @abstractmethod
    def find_by_ids(self, role_ids: Iterable[int]) -> List[models.Role]:
        """주어진 ID 중 존재하는 활성 역할들을 조회합니다."""
        pass

    @abstractmethod
    def find_by_name(self, name: str) -> Optional[models.Role]:
        """이름으로 활성 역할을 조회합니다."""
        pass

    @abstractmethod
    def create(self, role_model: models.Role) -> models.Role:
        """새로운 역할을 세션에 추가하고 flush합니다."""
        pass

    @abstractmethod
    def list_all(self) -> List[models.Role]:
        """모든 활성 역할을 ID 순으로 조회합니다."""
        pass
