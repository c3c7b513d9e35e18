import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from src.database import models
from src.repositories.interfaces import IUnitOfWork, IProductRepository, ICategoryRepository, IUserRepository
from src.services.dto import product_to_dict
from src.services.validation import optional_text, require_int
from src.services.exceptions import (
    ProductNotFoundError, ProductAlreadyExistsError, CategoryNotFoundError,
    UserNotFoundError, PermissionDeniedError
)

logger = logging.getLogger(__name__)

class ProductService:
    """상품 CRUD. 판매자는 자신의 상품만 관리할 수 있고, Super Admin은 모든 상품을 관리합니다."""

    def __init__(self, product_repo: IProductRepository, category_repo: ICategoryRepository,
                 user_repo: IUserRepository, unit_of_work: IUnitOfWork):
        self.product_repo = product_repo
        self.category_repo = category_repo
        self.user_repo = user_repo
        self.unit_of_work = unit_of_work

    def list_products(self) -> List[Dict[str, Any]]:
        return [product_to_dict(p) for p in self.product_repo.list_all()]

    def list_products_by_seller(self, seller_id: int) -> List[Dict[str, Any]]:
        return [product_to_dict(p) for p in self.product_repo.list_by_seller_id(seller_id)]

    def get_product(self, product_id: int) -> Dict[str, Any]:
        return product_to_dict(self._get_or_raise(product_id))

    def create_product(self, current_user_id: int, is_super_admin: bool, name: str, price, stock: int,
                       category_id: int, description: Optional[str] = None, sku: Optional[str] = None,
                       image_path: Optional[str] = None, seller_id: Optional[int] = None) -> Dict[str, Any]:
        """
        새로운 상품을 등록합니다.

        Super Admin은 seller_id로 판매자를 지정할 수 있고(없으면 본인),
        판매자는 항상 본인 명의로만 등록합니다.

        Raises:
            ValueError: 이름, 가격(> 0), 재고(>= 0)가 올바르지 않을 때.
            CategoryNotFoundError: 카테고리가 없을 때.
            UserNotFoundError: 판매자를 찾을 수 없을 때.
            ProductAlreadyExistsError: 동일한 이름의 상품이 이미 존재할 때.
        """
        name, price, stock = self._validate(name, price, stock)
        description, sku, image_path = self._validate_text(description, sku, image_path)
        self._ensure_category(category_id)

        if seller_id is not None:
            require_int(seller_id, "sellerId")
        owner_id = (seller_id or current_user_id) if is_super_admin else current_user_id
        if not self.user_repo.find_by_id(owner_id):
            raise UserNotFoundError(f"Seller with id '{owner_id}' not found.")

        if self.product_repo.exists_by_name(name):
            raise ProductAlreadyExistsError("A product with this name already exists.")

        with self.unit_of_work.transaction():
            product = self.product_repo.create(models.Product(
                name=name,
                description=description,
                price=price,
                stock=stock,
                category_id=category_id,
                seller_id=owner_id,
                sku=sku,
                image_path=image_path,
                is_active=True,
            ))
        logger.info("Product %s created by user %s.", product.id, current_user_id)
        return self.get_product(product.id)

    def update_product(self, product_id: int, current_user_id: int, is_super_admin: bool, name: str, price,
                       stock: int, category_id: int, description: Optional[str] = None,
                       sku: Optional[str] = None, image_path: Optional[str] = None) -> Dict[str, Any]:
        """
        상품 정보를 수정합니다.

        Raises:
            ProductNotFoundError: 해당 ID의 상품을 찾을 수 없을 때.
            PermissionDeniedError: 판매자가 다른 판매자의 상품을 수정하려 할 때.
            CategoryNotFoundError: 카테고리가 없을 때.
            ProductAlreadyExistsError: 다른 상품이 같은 이름을 사용 중일 때.
        """
        product = self._get_or_raise(product_id)
        self._ensure_owner(product, current_user_id, is_super_admin)
        name, price, stock = self._validate(name, price, stock)
        description, sku, image_path = self._validate_text(description, sku, image_path)
        self._ensure_category(category_id)
        if self.product_repo.exists_by_name(name, exclude_id=product_id):
            raise ProductAlreadyExistsError("A product with this name already exists.")

        with self.unit_of_work.transaction():
            product.name = name
            product.description = description
            product.price = price
            product.stock = stock
            product.category_id = category_id
            product.sku = sku
            if image_path:
                product.image_path = image_path
            self.product_repo.update(product)
        return self.get_product(product_id)

    def delete_product(self, product_id: int, current_user_id: int, is_super_admin: bool) -> bool:
        """
        상품을 비활성화합니다.

        Raises:
            ProductNotFoundError: 해당 ID의 상품을 찾을 수 없을 때.
            PermissionDeniedError: 판매자가 다른 판매자의 상품을 삭제하려 할 때.
        """
        product = self._get_or_raise(product_id)
        self._ensure_owner(product, current_user_id, is_super_admin)

        with self.unit_of_work.transaction():
            product.is_active = False
            self.product_repo.update(product)
        logger.info("Product %s deactivated by user %s.", product_id, current_user_id)
        return True

    def _get_or_raise(self, product_id: int) -> models.Product:
        product = self.product_repo.find_by_id(product_id)
        if not product:
            raise ProductNotFoundError(f"Product with id '{product_id}' not found.")
        return product

    def _ensure_category(self, category_id: int):
        require_int(category_id, "categoryId")
        if not self.category_repo.find_by_id(category_id):
            raise CategoryNotFoundError(f"Category with id '{category_id}' not found.")

    @staticmethod
    def _ensure_owner(product: models.Product, current_user_id: int, is_super_admin: bool):
        if not is_super_admin and product.seller_id != current_user_id:
            raise PermissionDeniedError("You are not authorized to perform this action on this product.")

    @staticmethod
    def _validate(name: str, price, stock):
        name = optional_text(name, "name") or ""
        if not 2 <= len(name) <= 200:
            raise ValueError("Product name must be between 2 and 200 characters.")
        try:
            price = Decimal(str(price))
        except (InvalidOperation, TypeError, ValueError):
            raise ValueError("Price must be a number.")
        if not price.is_finite() or price <= 0:
            raise ValueError("Price must be greater than 0.")
        if isinstance(stock, bool) or not isinstance(stock, int) or stock < 0:
            raise ValueError("Stock must be greater than or equal to 0.")
        return name, price, stock

    @staticmethod
    def _validate_text(description, sku, image_path):
        return (
            optional_text(description, "description"),
            optional_text(sku, "sku"),
            optional_text(image_path, "imagePath"),
        )
