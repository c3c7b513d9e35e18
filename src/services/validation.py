from typing import Any, Optional


def require_text(value: Any, field_name: str) -> str:
    """
    JSON 본문에서 온 필수 문자열 값을 검증하고 앞뒤 공백을 제거해 반환합니다.

    Raises:
        ValueError: 값이 없거나, 문자열이 아니거나, 공백뿐일 때.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"'{field_name}' is required and must be a non-empty string.")
    return value.strip()


def optional_text(value: Any, field_name: str) -> Optional[str]:
    """선택 문자열 값. None/공백은 None으로, 문자열이 아닌 값은 ValueError로 처리합니다."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"'{field_name}' must be a string.")
    return value.strip() or None


def optional_bool(value: Any, field_name: str) -> Optional[bool]:
    if value is not None and not isinstance(value, bool):
        raise ValueError(f"'{field_name}' must be a boolean.")
    return value


def require_int(value: Any, field_name: str) -> int:
    # bool은 int의 하위 클래스이므로 따로 거부합니다.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{field_name}' must be an integer.")
    return value
