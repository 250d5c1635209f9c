from abc import ABC, abstractmethod
from typing import Any


class BaseTransformer(ABC):
    """
    Абстрактный базовый класс для всех трансформеров данных.
    """

    @abstractmethod
    def transform(self, data: Any, **kwargs) -> Any:
        """
        Преобразует сырые данные RemoteStore в модель снимка
        или модель снимка в переменные операции RemoteStore.

        :param data: Исходные данные (словарь ответа или объект модели).
        :param kwargs: Дополнительные параметры, необходимые для трансформации.
        :return: Результат преобразования.
        """
        pass
