from typing import Optional

from models.board_snapshot import BoardSnapshot, BoardState
from models.result_models import MoveState


class TransitionError(Exception):
    pass


class MoveTransaction:
    """
    Оптимистичное перемещение как явный конечный автомат:
    IDLE -> OPTIMISTICALLY_APPLIED -> CONFIRMED | ROLLED_BACK

    Откат - обычный переход: восстанавливается снимок, который был
    текущим в момент apply().
    """
    def __init__(self, board_state: BoardState, description: str = ""):
        self._board_state = board_state
        self.description = description
        self.state = MoveState.IDLE
        self.before: Optional[BoardSnapshot] = None
        self.after: Optional[BoardSnapshot] = None

    def _require(self, expected: MoveState, action: str) -> None:
        if self.state != expected:
            raise TransitionError(f"Cannot {action} a move in state '{self.state.value}'")

    def apply(self, snapshot: BoardSnapshot) -> None:
        self._require(MoveState.IDLE, "apply")
        self.before = self._board_state.snapshot
        self.after = snapshot
        self._board_state.commit(snapshot)
        self.state = MoveState.OPTIMISTICALLY_APPLIED

    def confirm(self) -> None:
        self._require(MoveState.OPTIMISTICALLY_APPLIED, "confirm")
        self.state = MoveState.CONFIRMED

    def rollback(self) -> None:
        self._require(MoveState.OPTIMISTICALLY_APPLIED, "roll back")
        self._board_state.commit(self.before)
        self.state = MoveState.ROLLED_BACK

    @property
    def is_pending(self) -> bool:
        return self.state == MoveState.OPTIMISTICALLY_APPLIED
