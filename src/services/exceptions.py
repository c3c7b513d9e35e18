# src/services/exceptions.py

# --- Not Found ---
class UserNotFoundError(Exception):
    """사용자를 찾을 수 없을 때 (비활성 사용자 포함)"""
    pass

class RoleNotFoundError(Exception):
    """역할을 찾을 수 없을 때"""
    pass

class CategoryNotFoundError(Exception):
    """카테고리를 찾을 수 없을 때"""
    pass

class ProductNotFoundError(Exception):
    """상품을 찾을 수 없을 때"""
    pass

# --- Conflict ---
class EmailAlreadyExistsError(Exception):
    """이미 다른 사용자가 사용 중인 이메일일 때"""
    pass

class CategoryAlreadyExistsError(Exception):
    """카테고리 이름이 이미 존재할 때"""
    pass

class ProductAlreadyExistsError(Exception):
    """상품 이름이 이미 존재할 때"""
    pass

class CategoryNotEmptyError(Exception):
    """활성 상품이 남아 있는 카테고리를 삭제하려고 할 때"""
    pass

# --- Auth Exceptions ---
class TokenInvalidError(Exception):
    """토큰이 유효하지 않거나 없을 때"""
    pass

class AuthenticationError(Exception):
    """사용자 자격 증명 실패 시"""
    pass

class AccountLockedError(Exception):
    """로그인 실패 누적으로 계정이 잠겨 있을 때"""
    pass

class PermissionDeniedError(Exception):
    """요청자에게 필요한 역할이 없거나 다른 판매자의 리소스에 접근할 때"""
    pass
