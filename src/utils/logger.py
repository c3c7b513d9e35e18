# src/utils/logger.py
import logging

from src import config

_configured = False


def configure_logging(level: str = None):
    """
    콘솔 핸들러 하나로 루트 로거를 설정합니다. 여러 번 호출해도 한 번만 적용됩니다.
    """
    global _configured
    if _configured:
        return

    level_value = getattr(logging, (level or config.LOG_LEVEL), logging.INFO)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(level_value)
    console.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    ))
    root.addHandler(console)
    root.setLevel(level_value)

    # SQLAlchemy 엔진 로그는 WARNING 이상만 출력
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    _configured = True
