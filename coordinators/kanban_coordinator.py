import asyncio
import inspect
import random
from typing import Any, Callable, List, Optional, Sequence

from connectors.operations import (
    ARCHIVE_CARD, ARCHIVE_LIST, BATCH_UPDATE_LIST_POSITIONS, BATCH_UPDATE_POSITIONS,
    CREATE_CARD, CREATE_LIST, FETCH_BOARD_DATA, UPDATE_CARD_FIELDS, UPDATE_CARD_POSITION,
    UPDATE_LIST,
)
from coordinators.base_coordinator import BaseCoordinator, coordinator_boundary
from coordinators.card_details_coordinator import CardDetailsCoordinator
from coordinators.move_transaction import MoveTransaction
from config.settings import settings
from engine.ordering import (
    apply_cross_list, apply_list_reorder, apply_within_list, clamp_index,
    move_across_lists, move_within_list, next_position, remove_item,
    reorder_lists as reorder_list_positions,
)
from models.kanban_models import Card, KanbanList, PositionUpdate
from models.result_models import MoveState, MutationResult, RemoteResult
from transformers.board_transformer import BoardTransformer
from transformers.card_transformer import CardTransformer
from transformers.list_transformer import ListTransformer
from transformers.position_transformer import PositionTransformer
from utils.logger import get_logger

logger = get_logger(__name__)

# celebrate(list, card) может быть синхронной функцией или корутиной
CelebrateHook = Callable[[KanbanList, Card], Any]


class KanbanCoordinator(BaseCoordinator):
    """
    Координатор мутаций доски: списки, карточки, перемещения.

    Перемещения применяются оптимистично (MoveTransaction) и откатываются
    при ошибке RemoteStore. Создание, изменение и архивация сначала идут
    в RemoteStore и попадают в снимок только после подтверждения.
    """
    def __init__(self, remote, current_user_id: Optional[str] = None, state=None,
                 celebrate: Optional[CelebrateHook] = None,
                 list_colors: Optional[Sequence[str]] = None, **kwargs):
        super().__init__(remote, current_user_id=current_user_id, state=state, **kwargs)
        self.celebrate = celebrate
        self.list_colors = list(list_colors) if list_colors else settings.get_list_colors()

        self.card_transformer = CardTransformer()
        self.list_transformer = ListTransformer(self.card_transformer)
        self.board_transformer = BoardTransformer(self.list_transformer)
        self.position_transformer = PositionTransformer()

        self._details: Optional[CardDetailsCoordinator] = None

    @property
    def details(self) -> CardDetailsCoordinator:
        """Участники, вложения и комментарии карточек над тем же снимком"""
        if self._details is None:
            self._details = CardDetailsCoordinator.sharing(self)
        return self._details

    def clear_error(self) -> None:
        self.state.clear_error()

    # ==================== загрузка ====================

    @coordinator_boundary
    async def fetch_board_data(self, board_id: str) -> MutationResult:
        """Загружает доску и заменяет снимок целиком"""
        logger.info(f"📥 Загрузка доски {board_id}...")
        async with self._guard():
            self.state.is_loading = True
            self.state.clear_error()
            try:
                result = await self._execute(FETCH_BOARD_DATA, {'board_id': board_id})
            finally:
                self.state.is_loading = False

            if not result.ok:
                return self._fail(result.error)

            snapshot = self.board_transformer.transform(result.data or {})
            self.state.commit(snapshot)

        logger.success(f"✅ Доска {board_id} загружена: {len(snapshot.lists)} списков")
        return self._succeed()

    # ==================== списки ====================

    @coordinator_boundary
    async def create_list(self, board_id: str, name: str, color: Optional[str] = None) -> MutationResult:
        if not name or not name.strip():
            return self._reject("List name is required")
        rejection = self._require_user()
        if rejection:
            return rejection

        async with self._guard():
            position = next_position(self.state.snapshot.lists)
            variables = {
                'board_id': board_id,
                'name': name.strip(),
                'position': position,
                'color': color or random.choice(self.list_colors),
                'created_by': self.current_user_id,
            }
            result = await self._execute(CREATE_LIST, variables)
            if not result.ok:
                return self._fail(result.error)

            raw = self._payload(result, CREATE_LIST)
            if not raw:
                return self._fail("Failed to create list")

            new_list = self.list_transformer.transform(raw)
            self.state.commit(self.state.snapshot.with_appended_list(new_list))

        logger.success(f"✅ Список '{new_list.name}' создан на позиции {new_list.position}")
        return self._succeed(kanban_list=new_list)

    @coordinator_boundary
    async def update_list(self, list_id: str, **fields) -> MutationResult:
        """Меняет name/color/confetti/is_final; отправляются только переданные поля"""
        unsupported = self.list_transformer.unsupported_fields(fields)
        if unsupported:
            return self._reject(f"Unsupported list fields: {', '.join(unsupported)}")
        if not fields:
            return self._reject("Nothing to update")
        if 'name' in fields and (not fields['name'] or not fields['name'].strip()):
            return self._reject("List name is required")

        async with self._guard():
            if self.state.snapshot.find_list(list_id) is None:
                return self._reject("List not found")

            result = await self._execute(UPDATE_LIST, {
                'id': list_id,
                'changes': self.list_transformer.changes(fields),
            })
            if not result.ok:
                return self._fail(result.error)

            raw = self._payload(result, UPDATE_LIST)
            if not raw:
                return self._fail("Failed to update list")

            current = self.state.snapshot.find_list(list_id)
            updated = self.list_transformer.merge(current, raw)
            self.state.commit(self.state.snapshot.with_list(updated))

        logger.success(f"✅ Список {list_id} обновлен: {sorted(fields)}")
        return self._succeed(kanban_list=updated)

    @coordinator_boundary
    async def delete_list(self, list_id: str) -> MutationResult:
        """Архивирует список; из снимка он убирается только после подтверждения"""
        async with self._guard():
            if self.state.snapshot.find_list(list_id) is None:
                return self._reject("List not found")

            result = await self._execute(ARCHIVE_LIST, {'id': list_id})
            if not result.ok:
                return self._fail(result.error)
            if not self._payload(result, ARCHIVE_LIST):
                return self._fail("Failed to delete list")

            snapshot = self.state.snapshot
            removal = remove_item(snapshot.lists, list_id)
            self.state.commit(snapshot.with_lists(removal.items))
            await self._persist_positions(BATCH_UPDATE_LIST_POSITIONS, removal.position_updates)

        logger.success(f"🗄️ Список {list_id} архивирован")
        return self._succeed()

    @coordinator_boundary
    async def reorder_lists(self, list_id: str, target_index: int) -> MutationResult:
        """Оптимистично перемещает список среди списков доски"""
        async with self._guard():
            snapshot = self.state.snapshot
            current = next((i for i, kanban_list in enumerate(snapshot.lists) if kanban_list.id == list_id), -1)
            if current == -1:
                return self._reject("List not found")
            if clamp_index(target_index, len(snapshot.lists) - 1) == current:
                return self._succeed(state=MoveState.IDLE)

            reorder = reorder_list_positions(snapshot.lists, list_id, target_index)
            transaction = MoveTransaction(self.state, f"list {list_id} -> {target_index}")
            try:
                transaction.apply(apply_list_reorder(snapshot, reorder))
                result = await self._execute(BATCH_UPDATE_LIST_POSITIONS,
                                             self.position_transformer.transform(reorder.position_updates))
                result = self._require_payload(result, BATCH_UPDATE_LIST_POSITIONS, "Failed to reorder lists")
                return self._settle(transaction, result)
            except Exception:
                if transaction.is_pending:
                    transaction.rollback()
                raise

    # ==================== карточки ====================

    @coordinator_boundary
    async def create_card(self, list_id: str, title: str) -> MutationResult:
        if not title or not title.strip():
            return self._reject("Card title is required")
        rejection = self._require_user()
        if rejection:
            return rejection

        async with self._guard():
            kanban_list = self.state.snapshot.find_list(list_id)
            if kanban_list is None:
                return self._reject("List not found")

            result = await self._execute(CREATE_CARD, {
                'list_id': list_id,
                'title': title.strip(),
                'position': next_position(kanban_list.cards),
                'created_by': self.current_user_id,
            })
            if not result.ok:
                return self._fail(result.error)

            raw = self._payload(result, CREATE_CARD)
            if not raw:
                return self._fail("Failed to create card")

            card = self.card_transformer.transform(raw, list_id=list_id)
            current = self.state.snapshot.find_list(list_id)
            if current is not None:
                self.state.commit(self.state.snapshot.with_list_cards(list_id, [*current.cards, card]))

        logger.success(f"✅ Карточка '{card.title}' создана в списке {list_id}")
        return self._succeed(card=card)

    @coordinator_boundary
    async def update_card(self, card_id: str, **fields) -> MutationResult:
        """
        Меняет поля карточки; отправляются только переданные поля.
        list_id/position уводят изменение в move_card.
        """
        if not fields:
            return self._reject("Nothing to update")
        unsupported = self.card_transformer.unsupported_fields(fields)
        if unsupported:
            return self._reject(f"Unsupported card fields: {', '.join(unsupported)}")
        if 'title' in fields and (not fields['title'] or not fields['title'].strip()):
            return self._reject("Card title is required")
        if self.card_transformer.is_positional(fields):
            return await self._move_from_update(card_id, fields)

        async with self._guard():
            if self.state.snapshot.find_card(card_id) is None:
                return self._reject("Card not found")

            result = await self._execute(UPDATE_CARD_FIELDS, {
                'id': card_id,
                'changes': self.card_transformer.changes(fields),
            })
            if not result.ok:
                return self._fail(result.error)

            raw = self._payload(result, UPDATE_CARD_FIELDS)
            if not raw:
                return self._fail("Failed to update card")

            updated = self._replace_card(card_id, lambda card: self.card_transformer.merge(card, raw))
            if updated is not None and updated.is_archived:
                await self._drop_card(card_id)

        logger.success(f"✅ Карточка {card_id} обновлена: {sorted(fields)}")
        return self._succeed(card=updated)

    async def _move_from_update(self, card_id: str, fields: dict) -> MutationResult:
        location = self.state.snapshot.find_card_location(card_id)
        if location is None:
            return self._reject("Card not found")

        source, index = location
        rest = {key: value for key, value in fields.items() if key not in ('list_id', 'position')}
        result = await self.move_card(
            card_id,
            source.id,
            fields.get('list_id') or source.id,
            fields.get('position', index),
        )
        if not result.success or not rest:
            return result

        followup = await self.update_card(card_id, **rest)
        if followup.success:
            return followup

        # Перемещение уже подтверждено: сообщаем о частичном результате
        logger.warning(f"⚠️ Карточка {card_id} перемещена, но поля {sorted(rest)} не обновлены")
        return MutationResult.failed(
            f"Card moved, but field update failed: {followup.message}",
            card=self.state.snapshot.find_card(card_id),
            state=result.state,
        )

    @coordinator_boundary
    async def delete_card(self, card_id: str) -> MutationResult:
        """Архивирует карточку; из снимка она убирается только после подтверждения"""
        async with self._guard():
            if self.state.snapshot.find_card(card_id) is None:
                return self._reject("Card not found")

            result = await self._execute(ARCHIVE_CARD, {'id': card_id})
            if not result.ok:
                return self._fail(result.error)
            if not self._payload(result, ARCHIVE_CARD):
                return self._fail("Failed to archive card")

            await self._drop_card(card_id)

        logger.success(f"🗄️ Карточка {card_id} архивирована")
        return self._succeed()

    def remove_card_from_local_state(self, card_id: str) -> None:
        """Убирает карточку только из снимка (она уже изменена в RemoteStore)"""
        location = self.state.snapshot.find_card_location(card_id)
        if location is None:
            return
        kanban_list, _ = location
        removal = remove_item(kanban_list.cards, card_id)
        self.state.commit(self.state.snapshot.with_list_cards(kanban_list.id, removal.items))

    async def _drop_card(self, card_id: str) -> None:
        location = self.state.snapshot.find_card_location(card_id)
        if location is None:
            return
        kanban_list, _ = location
        removal = remove_item(kanban_list.cards, card_id)
        self.state.commit(self.state.snapshot.with_list_cards(kanban_list.id, removal.items))
        await self._persist_positions(BATCH_UPDATE_POSITIONS, removal.position_updates)

    async def _persist_positions(self, operation: str, updates: List[PositionUpdate]) -> bool:
        """Досылает перенумерацию после архивации; ошибка только логируется"""
        if not updates:
            return True
        result = await self._execute(operation, self.position_transformer.transform(updates), record_error=False)
        if not result.ok:
            logger.warning(f"⚠️ Перенумерация ({len(updates)} позиций) не сохранена: {result.error}")
        return result.ok

    # ==================== перемещение ====================

    @coordinator_boundary
    async def move_card(self, card_id: str, source_list_id: str, target_list_id: str,
                        target_index: int) -> MutationResult:
        """
        Перемещает карточку внутри списка или между списками.

        1. Движок вычисляет новый снимок.
        2. Снимок применяется сразу (оптимистично).
        3. Внутри списка - одна пакетная запись всех позиций;
           между списками - одна запись карточки (list_id, position,
           is_completed при переходе в финальный список), затем пакет
           сдвинутых соседей.
        4. Ошибка RemoteStore откатывает снимок к состоянию до перемещения.
        """
        async with self._guard():
            snapshot = self.state.snapshot
            source = snapshot.find_list(source_list_id)
            if source is None:
                return self._reject("Source list not found")

            index = source.index_of(card_id)
            if index == -1:
                return self._reject("Card not found")

            if source_list_id == target_list_id:
                return await self._move_within(source, card_id, index, target_index)

            target = snapshot.find_list(target_list_id)
            if target is None:
                return self._reject("Target list not found")

            outcome = await self._move_across(source, target, card_id, target_index)

        # Эффект запускается уже без блокировки мутаций
        if outcome.success and target.confetti:
            await self._celebrate_safely(target, outcome.card)
        return outcome

    async def _move_within(self, source: KanbanList, card_id: str, index: int,
                           target_index: int) -> MutationResult:
        if clamp_index(target_index, len(source.cards) - 1) == index:
            return self._succeed(card=source.cards[index], state=MoveState.IDLE)

        move = move_within_list(source, card_id, target_index)
        transaction = MoveTransaction(self.state, f"card {card_id} within {source.id}")
        try:
            transaction.apply(apply_within_list(self.state.snapshot, source.id, move))
            result = await self._execute(BATCH_UPDATE_POSITIONS,
                                         self.position_transformer.transform(move.position_updates))
            result = self._require_payload(result, BATCH_UPDATE_POSITIONS, "Failed to move card")
            moved = next(card for card in move.cards if card.id == card_id)
            return self._settle(transaction, result, card=moved)
        except Exception:
            if transaction.is_pending:
                transaction.rollback()
            raise

    async def _move_across(self, source: KanbanList, target: KanbanList, card_id: str,
                           target_index: int) -> MutationResult:
        original = source.cards[source.index_of(card_id)]
        move = move_across_lists(source, target, card_id, target_index)
        moved = move.moved_card

        transaction = MoveTransaction(self.state, f"card {card_id} {source.id} -> {target.id}")
        try:
            transaction.apply(apply_cross_list(self.state.snapshot, source.id, target.id, move))

            changes = {'list_id': target.id, 'position': moved.position}
            if move.derived_completion:
                changes['is_completed'] = True
            result = await self._execute(UPDATE_CARD_POSITION, {'id': card_id, 'changes': changes})
            result = self._require_payload(result, UPDATE_CARD_POSITION, "Failed to move card")

            if result.ok and move.sibling_updates:
                siblings = await self._execute(BATCH_UPDATE_POSITIONS,
                                               self.position_transformer.transform(move.sibling_updates))
                siblings = self._require_payload(siblings, BATCH_UPDATE_POSITIONS, "Failed to move card")
                if not siblings.ok:
                    await self._compensate_move(original)
                    result = siblings

            return self._settle(transaction, result, card=moved)
        except Exception:
            if transaction.is_pending:
                transaction.rollback()
            raise

    async def _compensate_move(self, original: Card) -> None:
        """Возвращает карточку на исходное место в RemoteStore (best effort)"""
        logger.warning(f"↩️ Компенсация перемещения карточки {original.id}")
        result = await self._execute(UPDATE_CARD_POSITION, {
            'id': original.id,
            'changes': {
                'list_id': original.list_id,
                'position': original.position,
                'is_completed': original.is_completed,
            },
        }, record_error=False)
        if not result.ok:
            logger.error(f"❌ Не удалось вернуть карточку {original.id} на место: {result.error}")

    def _require_payload(self, result: RemoteResult, operation: str, message: str) -> RemoteResult:
        """Ответ без данных операции считается ошибкой RemoteStore"""
        if result.ok and not self._payload(result, operation):
            logger.error(f"❌ {operation} вернула пустой ответ")
            self.state.set_error(message)
            return RemoteResult(error=message)
        return result

    def _settle(self, transaction: MoveTransaction, result: RemoteResult,
                card: Optional[Card] = None) -> MutationResult:
        if result.ok:
            transaction.confirm()
            logger.success(f"✅ Перемещение подтверждено: {transaction.description}")
            return self._succeed(card=card, state=transaction.state)

        transaction.rollback()
        self.stats['rolled_back'] += 1
        logger.warning(f"↩️ Перемещение откачено: {transaction.description}")
        return self._fail(result.error, state=transaction.state)

    async def _celebrate_safely(self, kanban_list: KanbanList, card: Card) -> None:
        if self.celebrate is None:
            return
        try:
            outcome = self.celebrate(kanban_list, card)
            if inspect.isawaitable(outcome):
                if self.mutation_timeout:
                    await asyncio.wait_for(outcome, timeout=self.mutation_timeout)
                else:
                    await outcome
        except Exception as e:
            self.stats['side_effect_errors'] += 1
            logger.warning(f"🎉 Праздничный эффект для списка '{kanban_list.name}' не сработал: {e}")
