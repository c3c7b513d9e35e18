from datetime import datetime
from typing import Any, Dict, Optional

from src.database import models


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def user_to_dict(user: models.User) -> Dict[str, Any]:
    """사용자 응답 DTO. 비밀번호 해시는 포함하지 않습니다."""
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "phone_number": user.phone_number,
        "email_verified_at": _iso(user.email_verified_at),
        "last_login_at": _iso(user.last_login_at),
        "login_attempt_count": user.login_attempt_count or 0,
        "locked_until": _iso(user.locked_until),
        "created_at": _iso(user.created_at),
        "updated_at": _iso(user.updated_at),
        "is_active": user.is_active,
        "roles": user.effective_role_names(),
    }


def role_to_dict(role: models.Role) -> Dict[str, Any]:
    return {"id": role.id, "name": role.name, "description": role.description}


def category_to_dict(category: models.Category) -> Dict[str, Any]:
    return {
        "id": category.id,
        "name": category.name,
        "description": category.description,
        "image_path": category.image_path,
        "created_at": _iso(category.created_at),
        "updated_at": _iso(category.updated_at),
        "is_active": category.is_active,
    }


def product_to_dict(product: models.Product) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": str(product.price) if product.price is not None else None,
        "stock": product.stock,
        "category_id": product.category_id,
        "category_name": product.category.name if product.category else "",
        "seller_id": product.seller_id,
        "seller_name": product.seller.full_name if product.seller else "",
        "image_path": product.image_path,
        "sku": product.sku,
        "created_at": _iso(product.created_at),
        "updated_at": _iso(product.updated_at),
        "is_active": product.is_active,
    }
