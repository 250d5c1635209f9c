from datetime import date, datetime

import pytest

from models.board_snapshot import BoardSnapshot
from models.kanban_models import Board, CardMember, Priority
from views.filter_view import (
    UNASSIGNED, DueDateFilter, FilterCriteria, PrioritySort, add_month, filter_board, filter_lists,
)

from conftest import make_card, make_list

TODAY = date(2024, 3, 15)


def member(user_id):
    return CardMember(id=f"m-{user_id}", user_id=user_id)


@pytest.fixture
def filter_snapshot() -> BoardSnapshot:
    """
    Backlog: Fix login bug (u1, urgent, 5 SP, вчера), Write docs (без участников, low, сегодня),
    Login page polish (u2, high, tag ui, через 5 дней), Refactor (normal, без срока).
    Review: Login audit (u1, через 20 дней), Release notes (high, через 2 месяца).
    """
    backlog = make_list('backlog', [], position=0)
    review = make_list('review', [], position=1)
    backlog = backlog.model_copy(update={'cards': [
        make_card('c1', 'backlog', 0, title='Fix login bug', members=[member('u1')], member_count=1,
                  priority=Priority.URGENT, story_points=5, due_date=datetime(2024, 3, 14, 18, 0)),
        make_card('c2', 'backlog', 1, title='Write docs', priority=Priority.LOW,
                  due_date=datetime(2024, 3, 15, 23, 59)),
        make_card('c3', 'backlog', 2, title='Login page polish', members=[member('u2')], member_count=1,
                  priority=Priority.HIGH, tag_ids=['ui'], story_points=3,
                  due_date=datetime(2024, 3, 20, 9, 0)),
        make_card('c4', 'backlog', 3, title='Refactor', priority=Priority.NORMAL),
    ]})
    review = review.model_copy(update={'cards': [
        make_card('c5', 'review', 0, title='LOGIN audit', members=[member('u1')], member_count=1,
                  due_date=datetime(2024, 4, 4, 12, 0)),
        make_card('c6', 'review', 1, title='Release notes', priority=Priority.HIGH,
                  due_date=datetime(2024, 5, 20, 12, 0)),
    ]})
    return BoardSnapshot(board=Board(id='board-1', name='Sprint'), lists=[backlog, review])


def visible(lists):
    return {kanban_list.id: [card.id for card in kanban_list.cards] for kanban_list in lists}


def test_no_criteria_shows_everything(filter_snapshot):
    result = filter_board(filter_snapshot, today=TODAY)

    assert result.visible_cards == result.total_cards == 6
    assert FilterCriteria().is_active is False


def test_text_and_member_filter(filter_snapshot):
    """'login' + участник u1: видны только карточки u1 с 'login' в названии, списки не пропадают"""
    criteria = FilterCriteria(search_text='login', member_ids=['u1'])

    lists = filter_lists(filter_snapshot, criteria, today=TODAY)

    assert visible(lists) == {'backlog': ['c1'], 'review': ['c5']}


def test_unassigned_member_filter(filter_snapshot):
    lists = filter_lists(filter_snapshot, FilterCriteria(member_ids=[UNASSIGNED]), today=TODAY)

    assert visible(lists) == {'backlog': ['c2', 'c4'], 'review': ['c6']}


def test_unassigned_combined_with_member(filter_snapshot):
    lists = filter_lists(filter_snapshot, FilterCriteria(member_ids=[UNASSIGNED, 'u2']), today=TODAY)

    assert visible(lists)['backlog'] == ['c2', 'c3', 'c4']


def test_priority_tag_and_points_filters(filter_snapshot):
    by_priority = filter_lists(filter_snapshot, FilterCriteria(priorities=[Priority.HIGH]), today=TODAY)
    by_tag = filter_lists(filter_snapshot, FilterCriteria(tag_ids=['ui', 'missing']), today=TODAY)
    by_points = filter_lists(filter_snapshot, FilterCriteria(story_points=[5, 8]), today=TODAY)

    assert visible(by_priority) == {'backlog': ['c3'], 'review': ['c6']}
    assert visible(by_tag) == {'backlog': ['c3'], 'review': []}
    assert visible(by_points) == {'backlog': ['c1'], 'review': []}


@pytest.mark.parametrize("due_filter, expected", [
    (DueDateFilter.OVERDUE, {'backlog': ['c1'], 'review': []}),
    (DueDateFilter.TODAY, {'backlog': ['c2'], 'review': []}),
    (DueDateFilter.WEEK, {'backlog': ['c2', 'c3'], 'review': []}),
    (DueDateFilter.MONTH, {'backlog': ['c2', 'c3'], 'review': ['c5']}),
    (DueDateFilter.NO_DATE, {'backlog': ['c4'], 'review': []}),
])
def test_due_date_buckets(filter_snapshot, due_filter, expected):
    lists = filter_lists(filter_snapshot, FilterCriteria(due_date=due_filter), today=TODAY)

    assert visible(lists) == expected


def test_priority_sort(filter_snapshot):
    """Стабильная сортировка: карточки без приоритета в начале по возрастанию"""
    ascending = filter_lists(filter_snapshot, FilterCriteria(priority_sort=PrioritySort.LOW_TO_URGENT),
                             today=TODAY)
    descending = filter_lists(filter_snapshot, FilterCriteria(priority_sort=PrioritySort.URGENT_TO_LOW),
                              today=TODAY)

    assert visible(ascending) == {'backlog': ['c2', 'c4', 'c3', 'c1'], 'review': ['c5', 'c6']}
    assert visible(descending) == {'backlog': ['c1', 'c3', 'c4', 'c2'], 'review': ['c6', 'c5']}


def test_filter_does_not_touch_snapshot(filter_snapshot):
    before = filter_snapshot.model_copy(deep=True)

    result = filter_board(filter_snapshot, FilterCriteria(search_text='zzz',
                                                          priority_sort=PrioritySort.URGENT_TO_LOW),
                          today=TODAY)

    assert result.visible_cards == 0
    assert result.total_cards == 6
    assert filter_snapshot == before
    assert [card.position for card in filter_snapshot.lists[0].cards] == [0, 1, 2, 3]


def test_add_month_clamps_day():
    assert add_month(date(2024, 1, 31)) == date(2024, 2, 29)
    assert add_month(date(2024, 12, 10)) == date(2025, 1, 10)


def test_text_with_unassigned_filter():
    """'bug' + без участников: из пяти карточек видны только неназначенные с 'bug' в названии"""
    bugs = make_list('bugs', [])
    bugs = bugs.model_copy(update={'cards': [
        make_card('b1', 'bugs', 0, title='Bug in export'),
        make_card('b2', 'bugs', 1, title='Login BUG', members=[member('u1')]),
        make_card('b3', 'bugs', 2, title='Feature request'),
        make_card('b4', 'bugs', 3, title='debug logging'),
        make_card('b5', 'bugs', 4, title='Docs', members=[member('u2')]),
    ]})
    snapshot = BoardSnapshot(lists=[bugs])

    lists = filter_lists(snapshot, FilterCriteria(search_text='bug', member_ids=[UNASSIGNED]), today=TODAY)

    assert visible(lists) == {'bugs': ['b1', 'b4']}
