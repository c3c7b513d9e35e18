import logging
from contextlib import contextmanager

from sqlalchemy.orm import Session
from src.repositories.interfaces import IUnitOfWork

logger = logging.getLogger(__name__)

class SqlalchemyUnitOfWork(IUnitOfWork):
    """요청마다 주입되는 세션 하나를 기준으로 커밋/롤백 경계를 관리합니다."""

    def __init__(self, db_session: Session):
        self.db = db_session

    @contextmanager
    def transaction(self):
        try:
            yield self
            self.db.commit()
        except Exception:
            logger.warning("Transaction rolled back.")
            self.db.rollback()
            raise
