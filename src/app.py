# src/app.py
from wsgiref.simple_server import make_server
from urllib.parse import parse_qs
import json
import logging
import re

# SQLAlchemy 및 의존성 임포트
from src import config
from src.database import models
from src.database.database import SessionLocal
from src.database.unit_of_work import SqlalchemyUnitOfWork
from src.repositories.interfaces import UserFilter
from src.repositories.sqlalchemy.sqlalchemy_user_repository import SqlalchemyUserRepository
from src.repositories.sqlalchemy.sqlalchemy_role_repository import SqlalchemyRoleRepository
from src.repositories.sqlalchemy.sqlalchemy_category_repository import SqlalchemyCategoryRepository
from src.repositories.sqlalchemy.sqlalchemy_product_repository import SqlalchemyProductRepository
from src.services.auth_service import AuthService, require_any_role
from src.services.category_service import CategoryService
from src.services.product_service import ProductService
from src.services.token_service import TokenService
from src.services.user_service import UserService
from src.services.exceptions import *
from src.utils.logger import configure_logging

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------
## 요청 처리 유틸리티 함수
# --------------------------------------------------------------------------

def get_request_data(environ):
    try:
        content_length = int(environ.get("CONTENT_LENGTH") or 0)
        data = json.loads(environ["wsgi.input"].read(content_length)) if content_length > 0 else {}
    except (ValueError, json.JSONDecodeError):
        raise ValueError("Invalid or missing JSON body.")
    if not isinstance(data, dict):
        raise ValueError("JSON body must be an object.")
    return data

def get_query_params(environ):
    # 쿼리 파라미터 이름은 대소문자를 구분하지 않습니다. (pageNumber == pagenumber)
    parsed = parse_qs(environ.get("QUERY_STRING", ""))
    return {key.lower(): values[-1] for key, values in parsed.items()}

def parse_int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None

def parse_bool(value):
    if value is None:
        return None
    lowered = str(value).strip().lower()
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    return None

def authorize_and_get_token_data(environ, *role_names):
    header = environ.get('HTTP_AUTHORIZATION', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        raise TokenInvalidError("Missing 'Authorization: Bearer' header.")
    token_data = environ['services']['auth'].validate_token(token.strip())
    if role_names:
        require_any_role(token_data, *role_names)
    return token_data

def handle_exception(e):
    error_map = {
        TokenInvalidError: "401 Unauthorized",
        AuthenticationError: "401 Unauthorized",
        AccountLockedError: "401 Unauthorized",
        PermissionDeniedError: "403 Forbidden",
        UserNotFoundError: "404 Not Found",
        RoleNotFoundError: "404 Not Found",
        CategoryNotFoundError: "404 Not Found",
        ProductNotFoundError: "404 Not Found",
        EmailAlreadyExistsError: "409 Conflict",
        CategoryAlreadyExistsError: "409 Conflict",
        ProductAlreadyExistsError: "409 Conflict",
        CategoryNotEmptyError: "409 Conflict",
        ValueError: "400 Bad Request",
    }
    status = error_map.get(type(e))
    if status is None:
        logger.exception("Unhandled error while processing request.")
        return "500 Internal Server Error", json.dumps({"error": "An internal server error occurred."})
    return status, json.dumps({"error": str(e)})

# --------------------------------------------------------------------------
## WSGI 애플리케이션 (의존성 주입 및 라우팅)
# --------------------------------------------------------------------------

ROUTES = []

def create_app(session_factory=SessionLocal, token_service=None):
    """
    WSGI 애플리케이션을 생성합니다. 요청마다 새 세션을 열고, 응답 후 닫습니다.

    Args:
        session_factory: SQLAlchemy 세션 팩토리. 테스트에서는 인메모리 DB용 팩토리를 넘깁니다.
        token_service: JWT 서비스. 없으면 설정값(SECRET_KEY)으로 생성합니다.
    """
    token_service = token_service or TokenService()

    def application(environ, start_response):
        db_session = session_factory()
        try:
            # 1. 의존성 생성 (Repositories -> Services)
            unit_of_work = SqlalchemyUnitOfWork(db_session)
            user_repo = SqlalchemyUserRepository(db_session)
            role_repo = SqlalchemyRoleRepository(db_session)
            category_repo = SqlalchemyCategoryRepository(db_session)
            product_repo = SqlalchemyProductRepository(db_session)

            # 2. 생성된 서비스 객체들을 environ을 통해 핸들러에 전달
            environ['services'] = {
                'auth': AuthService(user_repo, role_repo, unit_of_work, token_service),
                'user': UserService(user_repo, role_repo, unit_of_work),
                'category': CategoryService(category_repo, unit_of_work),
                'product': ProductService(product_repo, category_repo, user_repo, unit_of_work),
            }

            # 3. 라우팅 및 핸들러 실행
            path = environ.get("PATH_INFO", "")
            method = environ.get("REQUEST_METHOD", "")

            handler, path_args = None, []
            for route_method, pattern, route_handler in ROUTES:
                if method == route_method and (match := re.match(pattern, path)):
                    handler, path_args = route_handler, match.groups()
                    break

            if handler:
                status, response_body = handler(environ, *path_args)
            else:
                status, response_body = '404 Not Found', json.dumps({'error': 'Not Found'})

        except Exception as e:
            status, response_body = handle_exception(e)
        finally:
            db_session.close()

        start_response(status, [("Content-Type", "application/json")])
        return [response_body.encode("utf-8")]

    return application

# --------------------------------------------------------------------------
## 핸들러 함수 - 인증
# --------------------------------------------------------------------------

def register_handler(environ, *args):
    data = get_request_data(environ)
    result = environ['services']['auth'].register(
        first_name=data.get('firstName'),
        last_name=data.get('lastName'),
        email=data.get('email'),
        password=data.get('password'),
        phone_number=data.get('phoneNumber'),
    )
    return '201 Created', json.dumps(result)

def login_handler(environ, *args):
    data = get_request_data(environ)
    result = environ['services']['auth'].login(data.get('email'), data.get('password'))
    return '200 OK', json.dumps(result)

# --------------------------------------------------------------------------
## 핸들러 함수 - 사용자 관리 (Super Admin 전용)
# --------------------------------------------------------------------------

def list_users_handler(environ, *args):
    authorize_and_get_token_data(environ, models.SUPER_ADMIN)
    params = get_query_params(environ)
    user_filter = UserFilter.from_params(
        first_name=params.get('firstname'),
        last_name=params.get('lastname'),
        email=params.get('email'),
        phone_number=params.get('phonenumber'),
        is_active=parse_bool(params.get('isactive')),
        role_name=params.get('rolename'),
        is_locked=parse_bool(params.get('islocked')),
    )
    result = environ['services']['user'].list_users(
        page_number=parse_int(params.get('pagenumber')),
        page_size=parse_int(params.get('pagesize')),
        user_filter=user_filter,
        sort_by=params.get('sortby'),
        sort_descending=bool(parse_bool(params.get('sortdescending'))),
    )
    return '200 OK', json.dumps(result)

def get_user_handler(environ, user_id):
    authorize_and_get_token_data(environ, models.SUPER_ADMIN)
    user = environ['services']['user'].get_user(int(user_id))
    return '200 OK', json.dumps(user)

def update_user_handler(environ, user_id):
    authorize_and_get_token_data(environ, models.SUPER_ADMIN)
    data = get_request_data(environ)
    user = environ['services']['user'].update_user(
        int(user_id),
        first_name=data.get('firstName'),
        last_name=data.get('lastName'),
        email=data.get('email'),
        phone_number=data.get('phoneNumber'),
        is_active=data.get('isActive'),
    )
    return '200 OK', json.dumps(user)

def update_user_roles_handler(environ, user_id):
    authorize_and_get_token_data(environ, models.SUPER_ADMIN)
    data = get_request_data(environ)
    role_ids = data.get('roleIds')
    if not isinstance(role_ids, list):
        raise ValueError("'roleIds' must be a list of integers.")
    user = environ['services']['user'].update_roles(int(user_id), role_ids)
    return '200 OK', json.dumps(user)

def delete_user_handler(environ, user_id):
    authorize_and_get_token_data(environ, models.SUPER_ADMIN)
    user = environ['services']['user'].delete_user(int(user_id))
    return '200 OK', json.dumps(user)

def list_roles_handler(environ, *args):
    authorize_and_get_token_data(environ, models.SUPER_ADMIN)
    roles = environ['services']['user'].list_roles()
    return '200 OK', json.dumps({"roles": roles})

# --------------------------------------------------------------------------
## 핸들러 함수 - 카테고리
# --------------------------------------------------------------------------

def list_categories_handler(environ, *args):
    authorize_and_get_token_data(environ)
    categories = environ['services']['category'].list_categories()
    return '200 OK', json.dumps({"categories": categories})

def get_category_handler(environ, category_id):
    authorize_and_get_token_data(environ)
    category = environ['services']['category'].get_category(int(category_id))
    return '200 OK', json.dumps(category)

def create_category_handler(environ, *args):
    authorize_and_get_token_data(environ, models.SUPER_ADMIN)
    data = get_request_data(environ)
    category = environ['services']['category'].create_category(
        data.get('name'), data.get('description'), data.get('imagePath')
    )
    return '201 Created', json.dumps(category)

def update_category_handler(environ, category_id):
    authorize_and_get_token_data(environ, models.SUPER_ADMIN)
    data = get_request_data(environ)
    category = environ['services']['category'].update_category(
        int(category_id), data.get('name'), data.get('description'), data.get('imagePath')
    )
    return '200 OK', json.dumps(category)

def delete_category_handler(environ, category_id):
    authorize_and_get_token_data(environ, models.SUPER_ADMIN)
    environ['services']['category'].delete_category(int(category_id))
    return '204 No Content', ''

# --------------------------------------------------------------------------
## 핸들러 함수 - 상품
# --------------------------------------------------------------------------

def list_products_handler(environ, *args):
    products = environ['services']['product'].list_products()
    return '200 OK', json.dumps({"products": products})

def list_seller_products_handler(environ, seller_id):
    products = environ['services']['product'].list_products_by_seller(int(seller_id))
    return '200 OK', json.dumps({"products": products})

def get_product_handler(environ, product_id):
    product = environ['services']['product'].get_product(int(product_id))
    return '200 OK', json.dumps(product)

def create_product_handler(environ, *args):
    token_data = authorize_and_get_token_data(environ, models.SUPER_ADMIN, models.SELLER)
    data = get_request_data(environ)
    product = environ['services']['product'].create_product(
        current_user_id=token_data['user_id'],
        is_super_admin=models.SUPER_ADMIN in token_data['roles'],
        name=data.get('name'),
        price=data.get('price'),
        stock=data.get('stock'),
        category_id=data.get('categoryId'),
        description=data.get('description'),
        sku=data.get('sku'),
        image_path=data.get('imagePath'),
        seller_id=data.get('sellerId'),
    )
    return '201 Created', json.dumps(product)

def update_product_handler(environ, product_id):
    token_data = authorize_and_get_token_data(environ, models.SUPER_ADMIN, models.SELLER)
    data = get_request_data(environ)
    product = environ['services']['product'].update_product(
        int(product_id),
        current_user_id=token_data['user_id'],
        is_super_admin=models.SUPER_ADMIN in token_data['roles'],
        name=data.get('name'),
        price=data.get('price'),
        stock=data.get('stock'),
        category_id=data.get('categoryId'),
        description=data.get('description'),
        sku=data.get('sku'),
        image_path=data.get('imagePath'),
    )
    return '200 OK', json.dumps(product)

def delete_product_handler(environ, product_id):
    token_data = authorize_and_get_token_data(environ, models.SUPER_ADMIN, models.SELLER)
    environ['services']['product'].delete_product(
        int(product_id), token_data['user_id'], models.SUPER_ADMIN in token_data['roles']
    )
    return '204 No Content', ''

ROUTES.extend([
    ('POST', r'^/api/auth/register$', register_handler),
    ('POST', r'^/api/auth/login$', login_handler),
    ('GET', r'^/api/user$', list_users_handler),
    ('GET', r'^/api/user/([0-9]+)$', get_user_handler),
    ('PUT', r'^/api/user/([0-9]+)$', update_user_handler),
    ('PUT', r'^/api/user/([0-9]+)/roles$', update_user_roles_handler),
    ('DELETE', r'^/api/user/([0-9]+)$', delete_user_handler),
    ('GET', r'^/api/roles$', list_roles_handler),
    ('GET', r'^/api/category$', list_categories_handler),
    ('GET', r'^/api/category/([0-9]+)$', get_category_handler),
    ('POST', r'^/api/category$', create_category_handler),
    ('PUT', r'^/api/category/([0-9]+)$', update_category_handler),
    ('DELETE', r'^/api/category/([0-9]+)$', delete_category_handler),
    ('GET', r'^/api/product$', list_products_handler),
    ('GET', r'^/api/product/seller/([0-9]+)$', list_seller_products_handler),
    ('GET', r'^/api/product/([0-9]+)$', get_product_handler),
    ('POST', r'^/api/product$', create_product_handler),
    ('PUT', r'^/api/product/([0-9]+)$', update_product_handler),
    ('DELETE', r'^/api/product/([0-9]+)$', delete_product_handler),
])

application = create_app()

# --------------------------------------------------------------------------
## 서버 실행
# --------------------------------------------------------------------------

if __name__ == "__main__":
    configure_logging()
    try:
        with make_server("", config.HTTP_PORT, application) as httpd:
            logger.info("Serving marketplace backend on port %s...", config.HTTP_PORT)
            httpd.serve_forever()
    except Exception:
        logger.exception("Error starting server.")
