import pytest

from connectors.operations import ADD_CARD_MEMBER, DELETE_ATTACHMENT, GET_CARD_MEMBERS
from coordinators.kanban_coordinator import KanbanCoordinator
from models.kanban_models import CardAttachment, CardMember

from conftest import FakeRemoteStore, failure, ok

MEMBER_ROW = {
    'id': 'member-7',
    'card_id': 'x',
    'user_id': 'user-7',
    'assigned_at': '2024-03-02T08:20:00+00:00',
    'user': {'id': 'user-7', 'fullname': 'Мария Иванова', 'avatar_url': None},
}


@pytest.fixture
def staffed_state(board_state):
    """Карточка x с одним участником и одним вложением"""
    snapshot = board_state.snapshot
    todo = snapshot.find_list('todo')
    card = todo.cards[0].model_copy(update={
        'members': [CardMember(id='member-1', user_id='user-1', card_id='x')],
        'member_count': 1,
        'attachments': [CardAttachment(id='att-1', card_id='x', filename='spec.pdf')],
        'attachment_count': 1,
        'comment_ids': ['comment-1'],
    })
    board_state.commit(snapshot.with_list_cards('todo', [card, *todo.cards[1:]]))
    return board_state


def details_for(remote, state):
    return KanbanCoordinator(remote, current_user_id='user-1', state=state).details


@pytest.mark.asyncio
async def test_get_card_members(staffed_state):
    remote = FakeRemoteStore({GET_CARD_MEMBERS: ok(GET_CARD_MEMBERS, [MEMBER_ROW])})

    result = await details_for(remote, staffed_state).get_card_members('x')

    assert result.success is True
    assert [member.fullname for member in result.members] == ['Мария Иванова']
    assert remote.variables_of(GET_CARD_MEMBERS) == [{'card_id': 'x'}]


@pytest.mark.asyncio
async def test_add_card_member_updates_count(staffed_state):
    # 1. Подготовка
    remote = FakeRemoteStore({ADD_CARD_MEMBER: ok(ADD_CARD_MEMBER, MEMBER_ROW)})

    # 2. Выполнение
    result = await details_for(remote, staffed_state).add_card_member('x', 'user-7')

    # 3. Проверка
    assert result.success is True
    card = staffed_state.snapshot.find_card('x')
    assert card.member_user_ids == ['user-1', 'user-7']
    assert card.member_count == 2
    assert card.position == 0


@pytest.mark.asyncio
async def test_add_member_to_unknown_card(staffed_state):
    remote = FakeRemoteStore()

    result = await details_for(remote, staffed_state).add_card_member('ghost', 'user-7')

    assert result.message == "Card not found"
    assert remote.calls == []


@pytest.mark.asyncio
async def test_add_member_failure_keeps_snapshot(staffed_state):
    before = staffed_state.snapshot
    remote = FakeRemoteStore({ADD_CARD_MEMBER: failure("duplicate member")})

    result = await details_for(remote, staffed_state).add_card_member('x', 'user-1')

    assert result.success is False
    assert staffed_state.snapshot == before
    assert staffed_state.error == "duplicate member"


@pytest.mark.asyncio
async def test_remove_card_member(staffed_state):
    remote = FakeRemoteStore()

    result = await details_for(remote, staffed_state).remove_card_member('member-1')

    assert result.success is True
    card = staffed_state.snapshot.find_card('x')
    assert card.members == []
    assert card.member_count == 0


@pytest.mark.asyncio
async def test_delete_attachment(staffed_state):
    remote = FakeRemoteStore({DELETE_ATTACHMENT: ok(DELETE_ATTACHMENT, {'id': 'att-1'})})

    result = await details_for(remote, staffed_state).delete_attachment('att-1')

    assert result.success is True
    card = staffed_state.snapshot.find_card('x')
    assert card.attachments == []
    assert card.attachment_count == 0


@pytest.mark.asyncio
async def test_delete_attachment_without_payload_fails(staffed_state):
    remote = FakeRemoteStore({DELETE_ATTACHMENT: ok(DELETE_ATTACHMENT, None)})

    result = await details_for(remote, staffed_state).delete_attachment('att-1')

    assert result.message == "Failed to delete attachment"
    assert staffed_state.snapshot.find_card('x').attachment_count == 1


def test_local_comment_bookkeeping(staffed_state):
    details = details_for(FakeRemoteStore(), staffed_state)

    details.add_comment_to_card('x', 'comment-2')
    assert staffed_state.snapshot.find_card('x').comment_count == 2

    details.remove_comment_from_card('x', 'comment-1')
    assert staffed_state.snapshot.find_card('x').comment_ids == ['comment-2']


def test_details_share_state_and_stats(staffed_state):
    coordinator = KanbanCoordinator(FakeRemoteStore(), state=staffed_state)

    assert coordinator.details.state is coordinator.state
    assert coordinator.details.stats is coordinator.stats
    assert coordinator.details.lock is coordinator.lock
