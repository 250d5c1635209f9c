import pytest

from coordinators.move_transaction import MoveTransaction, TransitionError
from models.board_snapshot import BoardState
from models.result_models import MoveState


def test_apply_then_confirm(board_state, board_snapshot):
    after = board_snapshot.with_list_cards('todo', [])
    transaction = MoveTransaction(board_state, "clear todo")

    transaction.apply(after)
    assert transaction.state == MoveState.OPTIMISTICALLY_APPLIED
    assert transaction.is_pending is True
    assert board_state.snapshot is after

    transaction.confirm()
    assert transaction.state == MoveState.CONFIRMED
    assert board_state.snapshot is after


def test_rollback_restores_snapshot_from_apply_time(board_state, board_snapshot):
    transaction = MoveTransaction(board_state)

    transaction.apply(board_snapshot.with_list_cards('todo', []))
    transaction.rollback()

    assert transaction.state == MoveState.ROLLED_BACK
    assert board_state.snapshot is board_snapshot


@pytest.mark.parametrize("action", ['confirm', 'rollback'])
def test_settle_before_apply_is_rejected(action):
    transaction = MoveTransaction(BoardState())

    with pytest.raises(TransitionError):
        getattr(transaction, action)()


def test_second_settle_is_rejected(board_state, board_snapshot):
    transaction = MoveTransaction(board_state)
    transaction.apply(board_snapshot)
    transaction.confirm()

    with pytest.raises(TransitionError):
        transaction.rollback()
