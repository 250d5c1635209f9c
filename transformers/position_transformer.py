from typing import Any, Dict, List, Sequence

from models.kanban_models import PositionUpdate
from transformers.base_transformer import BaseTransformer


class PositionTransformer(BaseTransformer):
    """
    Преобразует набор новых позиций в переменные пакетной мутации
    (BatchUpdatePositions / BatchUpdateListPositions).
    """

    def transform(self, data: Sequence[PositionUpdate], **kwargs) -> Dict[str, Any]:
        updates: List[Dict[str, Any]] = [
            {
                'where': {'id': {'_eq': update.id}},
                '_set': {'position': update.position},
            }
            for update in data
        ]
        return {'updates': updates}
