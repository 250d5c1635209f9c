from typing import Any, Dict, List

from models.kanban_models import CardMember
from transformers.base_transformer import BaseTransformer


class MemberTransformer(BaseTransformer):
    """
    Преобразует запись участника карточки из ответа RemoteStore в CardMember.
    """

    def transform(self, data: Dict[str, Any], **kwargs) -> CardMember:
        user = data.get('user') or {}
        return CardMember(
            id=data['id'],
            user_id=data.get('user_id') or user.get('id'),
            card_id=data.get('card_id'),
            fullname=user.get('fullname'),
            avatar_url=user.get('avatar_url'),
            assigned_at=data.get('assigned_at'),
        )

    def transform_many(self, items: List[Dict[str, Any]]) -> List[CardMember]:
        return [self.transform(item) for item in items or []]
