from datetime import datetime, timezone


def utcnow() -> datetime:
    """DB에 저장하는 형식과 같은 naive UTC 현재 시각을 반환합니다."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
