import logging
from typing import Any, Dict, List, Optional

from src.database import models
from src.repositories.interfaces import IUnitOfWork, ICategoryRepository
from src.services.dto import category_to_dict
from src.services.exceptions import CategoryNotFoundError, CategoryAlreadyExistsError, CategoryNotEmptyError
from src.services.validation import optional_text

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 255

class CategoryService:
    def __init__(self, category_repo: ICategoryRepository, unit_of_work: IUnitOfWork):
        self.category_repo = category_repo
        self.unit_of_work = unit_of_work

    def list_categories(self) -> List[Dict[str, Any]]:
        return [category_to_dict(c) for c in self.category_repo.list_all()]

    def get_category(self, category_id: int) -> Dict[str, Any]:
        return category_to_dict(self._get_or_raise(category_id))

    def create_category(self, name: str, description: Optional[str] = None,
                        image_path: Optional[str] = None) -> Dict[str, Any]:
        """
        새로운 카테고리를 생성합니다.

        Raises:
            ValueError: 이름/설명 길이가 허용 범위를 벗어났을 때.
            CategoryAlreadyExistsError: 동일한 이름의 카테고리가 이미 존재할 때.
        """
        name, description = self._validate(name, description)
        image_path = optional_text(image_path, "imagePath")
        if self.category_repo.exists_by_name(name):
            raise CategoryAlreadyExistsError("A category with this name already exists.")

        with self.unit_of_work.transaction():
            category = self.category_repo.create(models.Category(
                name=name, description=description, image_path=image_path, is_active=True
            ))
        logger.info("Category %s created.", category.id)
        return category_to_dict(category)

    def update_category(self, category_id: int, name: str, description: Optional[str] = None,
                        image_path: Optional[str] = None) -> Dict[str, Any]:
        """
        카테고리 정보를 수정합니다. image_path가 없으면 기존 이미지를 유지합니다.

        Raises:
            CategoryNotFoundError: 해당 ID의 카테고리를 찾을 수 없을 때.
            CategoryAlreadyExistsError: 다른 카테고리가 같은 이름을 사용 중일 때.
        """
        name, description = self._validate(name, description)
        image_path = optional_text(image_path, "imagePath")
        category = self._get_or_raise(category_id)
        if self.category_repo.exists_by_name(name, exclude_id=category_id):
            raise CategoryAlreadyExistsError("A category with this name already exists.")

        with self.unit_of_work.transaction():
            category.name = name
            category.description = description
            if image_path:
                category.image_path = image_path
            self.category_repo.update(category)
        return category_to_dict(category)

    def delete_category(self, category_id: int) -> bool:
        """
        카테고리를 비활성화합니다. 활성 상품이 남아 있으면 삭제할 수 없습니다.

        Raises:
            CategoryNotFoundError: 해당 ID의 카테고리를 찾을 수 없을 때.
            CategoryNotEmptyError: 카테고리에 활성 상품이 하나 이상 있을 때.
        """
        category = self._get_or_raise(category_id)
        if self.category_repo.count_active_products(category_id) > 0:
            raise CategoryNotEmptyError("Category cannot be deleted because it has associated products.")

        with self.unit_of_work.transaction():
            category.is_active = False
            self.category_repo.update(category)
        logger.info("Category %s deactivated.", category_id)
        return True

    def _get_or_raise(self, category_id: int) -> models.Category:
        category = self.category_repo.find_by_id(category_id)
        if not category:
            raise CategoryNotFoundError(f"Category with id '{category_id}' not found.")
        return category

    @staticmethod
    def _validate(name: str, description: Optional[str]):
        name = optional_text(name, "name") or ""
        if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
            raise ValueError("Category name must be between 2 and 100 characters.")
        description = optional_text(description, "description")
        if description and len(description) > DESCRIPTION_MAX_LENGTH:
            raise ValueError("Category description must not exceed 255 characters.")
        return name, description
