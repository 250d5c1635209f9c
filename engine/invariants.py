"""
Проверки инвариантов снимка. Используются в тестах, не в рабочем пути.
"""

from typing import Dict, Sequence

from models.board_snapshot import BoardSnapshot
from models.kanban_models import KanbanList


class InvariantViolation(Exception):
    pass


def is_dense(items: Sequence) -> bool:
    """Позиции образуют перестановку 0..n-1"""
    return sorted(item.position for item in items) == list(range(len(items)))


def is_ordered(items: Sequence) -> bool:
    """Позиции совпадают с порядком массива"""
    return [item.position for item in items] == list(range(len(items)))


def assert_dense(kanban_list: KanbanList) -> None:
    active = [card for card in kanban_list.cards if not card.is_archived]
    if not is_dense(active):
        positions = [card.position for card in active]
        raise InvariantViolation(f"List {kanban_list.id} positions are not dense: {positions}")


def assert_single_residency(snapshot: BoardSnapshot) -> None:
    seen: Dict[str, str] = {}
    for kanban_list in snapshot.lists:
        for card in kanban_list.cards:
            if card.id in seen:
                raise InvariantViolation(
                    f"Card {card.id} is present in lists {seen[card.id]} and {kanban_list.id}")
            if card.list_id != kanban_list.id:
                raise InvariantViolation(
                    f"Card {card.id} claims list {card.list_id} but resides in {kanban_list.id}")
            seen[card.id] = kanban_list.id


def assert_snapshot_invariants(snapshot: BoardSnapshot) -> None:
    """Плотность списков и карточек, единственность размещения"""
    active_lists = [kanban_list for kanban_list in snapshot.lists if not kanban_list.is_archived]
    if not is_dense(active_lists):
        raise InvariantViolation(
            f"Board list positions are not dense: {[kanban_list.position for kanban_list in active_lists]}")
    for kanban_list in snapshot.lists:
        assert_dense(kanban_list)
    assert_single_residency(snapshot)
