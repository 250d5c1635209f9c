from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from models.result_models import RemoteResult


class RemoteStore(ABC):
    """
    Абстрактная граница с авторитетным хранилищем.
    Координаторы не знают о транспорте: только имя операции и переменные.
    """

    @abstractmethod
    async def execute(self, operation: str, variables: Optional[Dict[str, Any]] = None) -> RemoteResult:
        """
        Выполняет именованную операцию.

        :param operation: Имя операции (см. connectors.operations).
        :param variables: Переменные операции.
        :return: RemoteResult с data либо с error. Ожидаемые ошибки не бросаются.
        """
        pass
