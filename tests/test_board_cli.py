import pytest

from connectors.operations import FETCH_BOARD_DATA, UPDATE_CARD_POSITION
from models.result_models import RemoteResult
from scripts import board_cli

from conftest import FakeRemoteStore, failure

BOARD_DATA = {
    'kanban_boards': [{'id': 'b1', 'name': 'Sprint'}],
    'kanban_lists': [
        {'id': 'todo', 'name': 'To Do', 'board_id': 'b1', 'position': 0, 'kanban_cards': [
            {'id': 'c1', 'title': 'First', 'position': 0},
            {'id': 'c2', 'title': 'Second', 'position': 1},
        ]},
        {'id': 'done', 'name': 'Done', 'board_id': 'b1', 'position': 1, 'is_final': True, 'kanban_cards': []},
    ],
}


@pytest.fixture
def cli_remote(mocker):
    remote = FakeRemoteStore({FETCH_BOARD_DATA: RemoteResult(data=BOARD_DATA)})
    mocker.patch.object(board_cli, 'GraphQLClient', return_value=remote)
    return remote


@pytest.mark.asyncio
async def test_show_board(cli_remote):
    assert await board_cli.main(['--log-level', 'debug', 'show', 'b1', '--search', 'sec']) is True
    assert cli_remote.operations == [FETCH_BOARD_DATA]


@pytest.mark.asyncio
async def test_move_card_resolves_source_list(cli_remote):
    assert await board_cli.main(['--user', 'u1', 'move', 'b1', 'c2', 'done', '0']) is True

    assert cli_remote.variables_of(UPDATE_CARD_POSITION)[0] == {
        'id': 'c2',
        'changes': {'list_id': 'done', 'position': 0, 'is_completed': True},
    }


@pytest.mark.asyncio
async def test_move_unknown_card(cli_remote):
    assert await board_cli.main(['move', 'b1', 'ghost', 'done', '0']) is False


@pytest.mark.asyncio
async def test_load_failure(mocker):
    remote = FakeRemoteStore({FETCH_BOARD_DATA: failure("offline")})
    mocker.patch.object(board_cli, 'GraphQLClient', return_value=remote)

    assert await board_cli.main(['show', 'b1']) is False
