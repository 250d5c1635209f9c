from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from models.kanban_models import Card, CardAttachment, Priority
from transformers.base_transformer import BaseTransformer
from transformers.member_transformer import MemberTransformer
from utils.logger import get_logger

logger = get_logger(__name__)

# Скалярные поля карточки, приходящие из RemoteStore
CARD_SCALAR_FIELDS = (
    'id', 'title', 'list_id', 'position', 'description', 'cover_color',
    'cover_image_url', 'due_date', 'story_points', 'priority',
    'is_completed', 'is_archived', 'created_at', 'created_by',
)

# Поля, которые можно менять через UpdateCardFields
UPDATABLE_CARD_FIELDS = (
    'title', 'description', 'due_date', 'is_completed', 'is_archived',
    'cover_color', 'story_points', 'priority',
)

# Поля, которые меняют порядок и поэтому идут через перемещение
POSITIONAL_CARD_FIELDS = ('list_id', 'position')


def _aggregate_count(raw: Dict[str, Any], key: str, fallback: int) -> int:
    aggregate = (raw.get(key) or {}).get('aggregate') or {}
    count = aggregate.get('count')
    return count if isinstance(count, int) else fallback


def _to_wire(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class CardTransformer(BaseTransformer):
    """
    Трансформер карточек: ответ RemoteStore -> Card и
    частичные изменения Card -> переменные мутации.
    """
    def __init__(self, member_transformer: Optional[MemberTransformer] = None):
        self.member_transformer = member_transformer or MemberTransformer()

    def transform(self, data: Dict[str, Any], list_id: Optional[str] = None) -> Card:
        """
        Собирает Card из записи ответа, разворачивая агрегаты в счетчики.

        :param data: Запись карточки из ответа RemoteStore.
        :param list_id: ID списка, если запись пришла вложенной без list_id.
        :return: Объект Card.
        """
        fields = {key: data[key] for key in CARD_SCALAR_FIELDS if data.get(key) is not None}
        if list_id and not fields.get('list_id'):
            fields['list_id'] = list_id
        if 'priority' in fields:
            fields['priority'] = self._parse_priority(fields['priority'], data.get('id'))

        members = self.member_transformer.transform_many(data.get('kanban_card_members') or [])
        attachments = [CardAttachment(**item) for item in data.get('kanban_attachments') or []]
        comment_ids = [item['id'] for item in data.get('kanban_card_comments') or []]
        tag_ids = [item['tag_id'] for item in data.get('kanban_card_tags') or []]

        return Card(
            **fields,
            members=members,
            member_count=_aggregate_count(data, 'kanban_card_members_aggregate', len(members)),
            attachments=attachments,
            attachment_count=_aggregate_count(data, 'kanban_attachments_aggregate', len(attachments)),
            comment_ids=comment_ids,
            tag_ids=tag_ids,
        )

    @staticmethod
    def _parse_priority(value: Any, card_id: Any) -> Optional[Priority]:
        try:
            return Priority(value)
        except ValueError:
            logger.warning(f"Неизвестный приоритет '{value}' у карточки {card_id}, приоритет сброшен")
            return None

    @staticmethod
    def unsupported_fields(fields: Dict[str, Any]) -> List[str]:
        allowed = set(UPDATABLE_CARD_FIELDS) | set(POSITIONAL_CARD_FIELDS)
        return sorted(key for key in fields if key not in allowed)

    @staticmethod
    def is_positional(fields: Dict[str, Any]) -> bool:
        return any(key in fields for key in POSITIONAL_CARD_FIELDS)

    @staticmethod
    def changes(fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Переменные _set только для переданных полей.
        None означает явную очистку поля, отсутствие ключа - поле не трогаем.
        """
        return {key: _to_wire(fields[key]) for key in UPDATABLE_CARD_FIELDS if key in fields}

    def merge(self, card: Card, data: Dict[str, Any]) -> Card:
        """Накладывает поля из ответа RemoteStore на карточку снимка"""
        updates = {key: data[key] for key in CARD_SCALAR_FIELDS
                   if key in data and key not in ('id',) + POSITIONAL_CARD_FIELDS}
        if updates.get('priority') is not None:
            updates['priority'] = self._parse_priority(updates['priority'], card.id)
        return Card.model_validate({**card.model_dump(), **updates})
