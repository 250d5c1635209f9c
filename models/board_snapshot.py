"""
Снимок доски: доска и упорядоченные списки с упорядоченными карточками.

Снимок никогда не изменяется на месте. Все операции возвращают новый
снимок с новыми массивами, а BoardState заменяет текущий снимок одним
присваиванием.
"""

from typing import Callable, Iterable, List, Optional, Tuple
from pydantic import BaseModel, Field

from models.kanban_models import Board, Card, KanbanList


class BoardSnapshot(BaseModel):
    board: Optional[Board] = None
    lists: List[KanbanList] = Field(default_factory=list)

    # -------------------- чтение --------------------
    def find_list(self, list_id: str) -> Optional[KanbanList]:
        for kanban_list in self.lists:
            if kanban_list.id == list_id:
                return kanban_list
        return None

    def find_card(self, card_id: str) -> Optional[Card]:
        location = self.find_card_location(card_id)
        if location is None:
            return None
        kanban_list, index = location
        return kanban_list.cards[index]

    def find_card_location(self, card_id: str) -> Optional[Tuple[KanbanList, int]]:
        """Возвращает (список, индекс) для карточки или None"""
        for kanban_list in self.lists:
            index = kanban_list.index_of(card_id)
            if index != -1:
                return kanban_list, index
        return None

    def card_count(self, list_id: str) -> int:
        kanban_list = self.find_list(list_id)
        return len(kanban_list.cards) if kanban_list else 0

    def all_cards(self) -> List[Card]:
        return [card for kanban_list in self.lists for card in kanban_list.cards]

    # -------------------- копирование с изменениями --------------------
    def with_lists(self, lists: Iterable[KanbanList]) -> "BoardSnapshot":
        return self.model_copy(update={"lists": list(lists)})

    def with_list(self, updated: KanbanList) -> "BoardSnapshot":
        return self.with_lists(
            updated if kanban_list.id == updated.id else kanban_list
            for kanban_list in self.lists
        )

    def with_list_cards(self, list_id: str, cards: Iterable[Card]) -> "BoardSnapshot":
        kanban_list = self.find_list(list_id)
        if kanban_list is None:
            return self
        return self.with_list(kanban_list.model_copy(update={"cards": list(cards)}))

    def with_appended_list(self, new_list: KanbanList) -> "BoardSnapshot":
        return self.with_lists([*self.lists, new_list])

    def without_list(self, list_id: str) -> "BoardSnapshot":
        return self.with_lists(kanban_list for kanban_list in self.lists if kanban_list.id != list_id)

    def map_cards(self, func: Callable[[Card], Card]) -> "BoardSnapshot":
        """Применяет func к каждой карточке, возвращает новый снимок"""
        return self.with_lists(
            kanban_list.model_copy(update={"cards": [func(card) for card in kanban_list.cards]})
            for kanban_list in self.lists
        )


class BoardState:
    """
    Единственный разделяемый изменяемый ресурс: текущий снимок доски.
    Писать в него могут только координаторы мутаций.
    """

    def __init__(self, snapshot: Optional[BoardSnapshot] = None):
        self._snapshot = snapshot if snapshot is not None else BoardSnapshot()
        self.is_loading = False
        self.error: Optional[str] = None

    @property
    def snapshot(self) -> BoardSnapshot:
        return self._snapshot

    def commit(self, snapshot: BoardSnapshot) -> None:
        self._snapshot = snapshot

    def set_error(self, message: Optional[str]) -> None:
        self.error = message

    def clear_error(self) -> None:
        self.error = None
