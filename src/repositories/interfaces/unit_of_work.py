from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

class IUnitOfWork(ABC):
    @abstractmethod
    def transaction(self) -> AbstractContextManager:
        """
        하나의 원자적 작업 단위를 여는 컨텍스트 매니저를 반환합니다.
        블록이 정상 종료되면 커밋하고, 예외가 발생하면 롤백한 뒤 예외를 다시 던집니다.
        """
        pass
