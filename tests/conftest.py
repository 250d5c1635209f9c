"""Общие фикстуры: фейковый RemoteStore и фабрики снимков."""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from connectors.operations import RESULT_KEYS
from connectors.remote_store import RemoteStore
from models.board_snapshot import BoardSnapshot, BoardState
from models.kanban_models import Board, Card, KanbanList
from models.result_models import RemoteResult


def ok(operation: str, payload: Any) -> RemoteResult:
    """Успешный ответ операции с данными в ее корневом поле"""
    return RemoteResult(data={RESULT_KEYS[operation]: payload})


def failure(message: str = "boom") -> RemoteResult:
    return RemoteResult(error=message)


class FakeRemoteStore(RemoteStore):
    """
    RemoteStore со сценарием ответов.
    Ответ операции: RemoteResult, список RemoteResult (по очереди)
    или функция от переменных. Без сценария - обобщенный успех.
    """
    def __init__(self, responses: Optional[Dict[str, Any]] = None):
        self.responses = dict(responses or {})
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def execute(self, operation, variables=None):
        variables = variables or {}
        self.calls.append((operation, variables))

        response = self.responses.get(operation)
        if callable(response):
            response = response(variables)
        if isinstance(response, list):
            response = response.pop(0)
        if response is None:
            payload = {'affected_rows': 1}
            if 'id' in variables:
                payload['id'] = variables['id']
            return ok(operation, payload)
        return response

    @property
    def operations(self) -> List[str]:
        return [operation for operation, _ in self.calls]

    def variables_of(self, operation: str) -> List[Dict[str, Any]]:
        return [variables for name, variables in self.calls if name == operation]


def make_card(card_id: str, list_id: str, position: int, **fields) -> Card:
    fields.setdefault('title', f"Card {card_id}")
    return Card(id=card_id, list_id=list_id, position=position, **fields)


def make_list(list_id: str, card_ids=(), position: int = 0, **fields) -> KanbanList:
    fields.setdefault('name', list_id.title())
    fields.setdefault('board_id', 'board-1')
    cards = [make_card(card_id, list_id, index) for index, card_id in enumerate(card_ids)]
    return KanbanList(id=list_id, position=position, cards=cards, **fields)


@pytest.fixture
def board_snapshot() -> BoardSnapshot:
    """
    Доска: To Do [x, y, z], Doing [a], Done (финальный, с конфетти) [d].
    """
    return BoardSnapshot(
        board=Board(id='board-1', name='Sprint'),
        lists=[
            make_list('todo', ['x', 'y', 'z'], position=0, name='To Do'),
            make_list('doing', ['a'], position=1, name='Doing'),
            make_list('done', ['d'], position=2, name='Done', is_final=True, confetti=True),
        ],
    )


@pytest.fixture
def board_state(board_snapshot) -> BoardState:
    return BoardState(board_snapshot)


@pytest.fixture
def fake_remote() -> FakeRemoteStore:
    return FakeRemoteStore()
