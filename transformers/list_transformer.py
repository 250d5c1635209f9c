from typing import Any, Dict, List, Optional

from models.kanban_models import KanbanList
from transformers.base_transformer import BaseTransformer
from transformers.card_transformer import CardTransformer

LIST_SCALAR_FIELDS = (
    'id', 'name', 'board_id', 'position', 'color', 'confetti', 'is_final',
    'is_archived', 'created_at', 'updated_at', 'created_by',
)

UPDATABLE_LIST_FIELDS = ('name', 'color', 'confetti', 'is_final')


class ListTransformer(BaseTransformer):
    """
    Трансформер списков: ответ RemoteStore -> KanbanList с вложенными карточками.
    """
    def __init__(self, card_transformer: Optional[CardTransformer] = None):
        self.card_transformer = card_transformer or CardTransformer()

    def transform(self, data: Dict[str, Any], **kwargs) -> KanbanList:
        fields = {key: data[key] for key in LIST_SCALAR_FIELDS if data.get(key) is not None}
        cards = [
            self.card_transformer.transform(raw_card, list_id=data['id'])
            for raw_card in data.get('kanban_cards') or []
            if not raw_card.get('is_archived', False)
        ]
        cards.sort(key=lambda card: card.position)
        return KanbanList(**fields, cards=cards)

    @staticmethod
    def unsupported_fields(fields: Dict[str, Any]) -> List[str]:
        return sorted(key for key in fields if key not in UPDATABLE_LIST_FIELDS)

    @staticmethod
    def changes(fields: Dict[str, Any]) -> Dict[str, Any]:
        """Переменные _set только для переданных полей"""
        return {key: fields[key] for key in UPDATABLE_LIST_FIELDS if key in fields}

    @staticmethod
    def merge(kanban_list: KanbanList, data: Dict[str, Any]) -> KanbanList:
        updates = {key: data[key] for key in UPDATABLE_LIST_FIELDS if key in data}
        return kanban_list.model_copy(update=updates)
