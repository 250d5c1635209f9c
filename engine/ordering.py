"""
Движок упорядочивания: чистые синхронные функции перемещения.

Позиции всегда плотные: после любого изменения элементы перенумеровываются
в 0..n-1 в порядке массива. Некорректные индексы ограничиваются, а не
отклоняются, движок никогда не падает.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, TypeVar

from models.board_snapshot import BoardSnapshot
from models.kanban_models import Card, KanbanList, PositionUpdate

Positioned = TypeVar('Positioned', Card, KanbanList)


@dataclass(frozen=True)
class WithinListMove:
    cards: List[Card]
    position_updates: List[PositionUpdate]


@dataclass(frozen=True)
class CrossListMove:
    source_cards: List[Card]
    target_cards: List[Card]
    moved_card: Optional[Card]
    derived_completion: bool = False
    # Сдвинутые соседние карточки обоих списков (без самой перемещенной)
    sibling_updates: List[PositionUpdate] = field(default_factory=list)


@dataclass(frozen=True)
class ListReorder:
    lists: List[KanbanList]
    position_updates: List[PositionUpdate]


@dataclass(frozen=True)
class Removal:
    items: list
    position_updates: List[PositionUpdate]


def clamp_index(index: int, upper: int) -> int:
    """Ограничивает индекс диапазоном [0, upper]"""
    return max(0, min(index, upper))


def next_position(items: Sequence) -> int:
    """Позиция нового элемента: добавление в конец"""
    return len(items)


def renumber(items: Sequence[Positioned]) -> List[Positioned]:
    """Перенумеровывает элементы в 0..n-1 в порядке следования"""
    return [
        item if item.position == index else item.model_copy(update={'position': index})
        for index, item in enumerate(items)
    ]


def position_updates(items: Sequence[Positioned]) -> List[PositionUpdate]:
    return [PositionUpdate(id=item.id, position=item.position) for item in items]


def changed_positions(before: Sequence[Positioned], after: Sequence[Positioned]) -> List[PositionUpdate]:
    """Позиции, которые отличаются от исходных (новые элементы не учитываются)"""
    old: Dict[str, int] = {item.id: item.position for item in before}
    return [
        PositionUpdate(id=item.id, position=item.position)
        for item in after
        if item.id in old and old[item.id] != item.position
    ]


def move_within_list(kanban_list: KanbanList, card_id: str, target_index: int) -> WithinListMove:
    """
    Перемещает карточку внутри списка и перенумеровывает весь список.

    В position_updates попадают все карточки списка: любая карточка между
    старым и новым индексом сдвигается на одну позицию.
    """
    cards = list(kanban_list.cards)
    current = kanban_list.index_of(card_id)
    if current == -1:
        return WithinListMove(cards=renumber(cards), position_updates=[])

    target = clamp_index(target_index, len(cards) - 1)
    moved = cards.pop(current)
    cards.insert(target, moved)

    renumbered = renumber(cards)
    return WithinListMove(cards=renumbered, position_updates=position_updates(renumbered))


def move_across_lists(source: KanbanList, target: KanbanList, card_id: str, target_index: int) -> CrossListMove:
    """
    Переносит карточку в другой список одним логическим переходом.

    Источник перенумеровывается без карточки, карточка вставляется в цель
    по ограниченному индексу, цель перенумеровывается. Если цель финальная,
    а карточка не завершена, карточка становится завершенной.
    Завершенная карточка никогда не теряет is_completed при перемещении.
    """
    if source.id == target.id:
        within = move_within_list(source, card_id, target_index)
        moved = next((card for card in within.cards if card.id == card_id), None)
        return CrossListMove(source_cards=within.cards, target_cards=within.cards, moved_card=moved)

    index = source.index_of(card_id)
    if index == -1:
        return CrossListMove(source_cards=list(source.cards), target_cards=list(target.cards), moved_card=None)

    card = source.cards[index]
    remaining = renumber(source.cards[:index] + source.cards[index + 1:])

    derived_completion = target.is_final and not card.is_completed
    moved = card.model_copy(update={
        'list_id': target.id,
        'is_completed': card.is_completed or derived_completion,
    })

    insert_at = clamp_index(target_index, len(target.cards))
    target_cards = list(target.cards)
    target_cards.insert(insert_at, moved)
    target_cards = renumber(target_cards)

    sibling_updates = changed_positions(source.cards, remaining) + changed_positions(target.cards, target_cards)
    return CrossListMove(
        source_cards=remaining,
        target_cards=target_cards,
        moved_card=target_cards[insert_at],
        derived_completion=derived_completion,
        sibling_updates=sibling_updates,
    )


def reorder_lists(lists: Sequence[KanbanList], list_id: str, target_index: int) -> ListReorder:
    """Перемещает список среди списков доски, перенумеровывая все списки"""
    ordered = list(lists)
    current = next((i for i, kanban_list in enumerate(ordered) if kanban_list.id == list_id), -1)
    if current == -1:
        return ListReorder(lists=renumber(ordered), position_updates=[])

    target = clamp_index(target_index, len(ordered) - 1)
    moved = ordered.pop(current)
    ordered.insert(target, moved)

    renumbered = renumber(ordered)
    return ListReorder(lists=renumbered, position_updates=position_updates(renumbered))


def remove_item(items: Sequence[Positioned], item_id: str) -> Removal:
    """Убирает элемент (архивация) и возвращает перенумерованный остаток"""
    remaining = renumber([item for item in items if item.id != item_id])
    return Removal(items=remaining, position_updates=changed_positions(items, remaining))


# -------------------- применение к снимку --------------------
def apply_within_list(snapshot: BoardSnapshot, list_id: str, move: WithinListMove) -> BoardSnapshot:
    return snapshot.with_list_cards(list_id, move.cards)


def apply_cross_list(snapshot: BoardSnapshot, source_id: str, target_id: str, move: CrossListMove) -> BoardSnapshot:
    return (snapshot
            .with_list_cards(source_id, move.source_cards)
            .with_list_cards(target_id, move.target_cards))


def apply_list_reorder(snapshot: BoardSnapshot, reorder: ListReorder) -> BoardSnapshot:
    return snapshot.with_lists(reorder.lists)
