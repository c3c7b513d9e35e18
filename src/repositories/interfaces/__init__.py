from .unit_of_work import IUnitOfWork
from .user import IUserRepository, UserFilter, UserSortBy
from .role import IRoleRepository
from .category import ICategoryRepository
from .product import IProductRepository
