from connectors.operations import (
    ADD_CARD_MEMBER, DELETE_ATTACHMENT, GET_CARD_MEMBERS, REMOVE_CARD_MEMBER,
)
from coordinators.base_coordinator import BaseCoordinator, coordinator_boundary
from models.result_models import MutationResult
from transformers.member_transformer import MemberTransformer
from utils.logger import get_logger

logger = get_logger(__name__)


class CardDetailsCoordinator(BaseCoordinator):
    """
    Участники, вложения и комментарии карточек.
    Порядок не затрагивается: сначала RemoteStore, затем снимок.
    """
    def __init__(self, remote, **kwargs):
        super().__init__(remote, **kwargs)
        self.member_transformer = MemberTransformer()

    # -------------------- участники --------------------
    @coordinator_boundary
    async def get_card_members(self, card_id: str) -> MutationResult:
        result = await self._execute(GET_CARD_MEMBERS, {'card_id': card_id})
        if not result.ok:
            return self._fail(result.error)

        members = self.member_transformer.transform_many(self._payload(result, GET_CARD_MEMBERS) or [])
        logger.debug(f"Получено {len(members)} участников карточки {card_id}")
        return self._succeed(members=members)

    @coordinator_boundary
    async def add_card_member(self, card_id: str, user_id: str) -> MutationResult:
        async with self._guard():
            if self.state.snapshot.find_card(card_id) is None:
                return self._reject("Card not found")

            result = await self._execute(ADD_CARD_MEMBER, {'card_id': card_id, 'user_id': user_id})
            if not result.ok:
                return self._fail(result.error)

            raw = self._payload(result, ADD_CARD_MEMBER)
            if not raw:
                return self._fail("Failed to add member to card")

            member = self.member_transformer.transform(raw)
            card = self._replace_card(card_id, lambda c: c.model_copy(update={
                'members': [*c.members, member],
                'member_count': c.member_count + 1,
            }))

        logger.success(f"👤 Пользователь {user_id} назначен на карточку {card_id}")
        return self._succeed(card=card, members=card.members if card else [member])

    @coordinator_boundary
    async def remove_card_member(self, member_id: str) -> MutationResult:
        async with self._guard():
            result = await self._execute(REMOVE_CARD_MEMBER, {'id': member_id})
            if not result.ok:
                return self._fail(result.error)
            if not self._payload(result, REMOVE_CARD_MEMBER):
                return self._fail("Failed to remove member from card")

            holder = next((card for card in self.state.snapshot.all_cards()
                           if any(member.id == member_id for member in card.members)), None)
            card = None
            if holder is not None:
                def without_member(c):
                    members = [member for member in c.members if member.id != member_id]
                    return c.model_copy(update={'members': members, 'member_count': len(members)})
                card = self._replace_card(holder.id, without_member)

        logger.success(f"👤 Участник {member_id} снят с карточки")
        return self._succeed(card=card)

    # -------------------- вложения --------------------
    @coordinator_boundary
    async def delete_attachment(self, attachment_id: str) -> MutationResult:
        async with self._guard():
            result = await self._execute(DELETE_ATTACHMENT, {'id': attachment_id})
            if not result.ok:
                return self._fail(result.error)
            if not self._payload(result, DELETE_ATTACHMENT):
                return self._fail("Failed to delete attachment")

            holder = next((card for card in self.state.snapshot.all_cards()
                           if any(item.id == attachment_id for item in card.attachments)), None)
            card = None
            if holder is not None:
                def without_attachment(c):
                    attachments = [item for item in c.attachments if item.id != attachment_id]
                    return c.model_copy(update={'attachments': attachments,
                                                'attachment_count': len(attachments)})
                card = self._replace_card(holder.id, without_attachment)

        logger.success(f"📎 Вложение {attachment_id} удалено")
        return self._succeed(card=card)

    # -------------------- комментарии (только снимок) --------------------
    def add_comment_to_card(self, card_id: str, comment_id: str) -> None:
        self._replace_card(card_id, lambda c: c.model_copy(update={
            'comment_ids': [*c.comment_ids, comment_id],
        }))

    def remove_comment_from_card(self, card_id: str, comment_id: str) -> None:
        self._replace_card(card_id, lambda c: c.model_copy(update={
            'comment_ids': [existing for existing in c.comment_ids if existing != comment_id],
        }))
