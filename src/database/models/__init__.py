from .user import User
from .role import Role, SUPER_ADMIN, SELLER, BUYER, DEFAULT_ROLES
from .association import UserRole
from .category import Category
from .product import Product

__all__ = [
    "User", "Role", "UserRole", "Category", "Product",
    "SUPER_ADMIN", "SELLER", "BUYER", "DEFAULT_ROLES",
]
