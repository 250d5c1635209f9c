"""
Фильтр/поиск по снимку доски.

Чистая проекция: пересчитывается при каждой отрисовке из текущего снимка
и состояния фильтров, снимок и позиции не изменяет.
"""

import calendar
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from models.board_snapshot import BoardSnapshot
from models.kanban_models import Card, KanbanList, Priority

# Псевдо-ID участника: карточки без назначенных участников
UNASSIGNED = "unassigned"


class DueDateFilter(str, Enum):
    OVERDUE = "overdue"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    NO_DATE = "no-date"


class PrioritySort(str, Enum):
    LOW_TO_URGENT = "low-to-urgent"
    URGENT_TO_LOW = "urgent-to-low"


class FilterCriteria(BaseModel):
    """Пустой набор означает отсутствие ограничения"""
    search_text: str = ""
    member_ids: List[str] = Field(default_factory=list)
    priorities: List[Priority] = Field(default_factory=list)
    tag_ids: List[str] = Field(default_factory=list)
    story_points: List[int] = Field(default_factory=list)
    due_date: Optional[DueDateFilter] = None
    priority_sort: Optional[PrioritySort] = None

    @property
    def is_active(self) -> bool:
        return bool(self.search_text or self.member_ids or self.priorities or self.tag_ids
                    or self.story_points or self.due_date or self.priority_sort)


class FilteredBoard(BaseModel):
    lists: List[KanbanList]
    visible_cards: int
    total_cards: int


def add_month(day: date) -> date:
    """Тот же день следующего месяца (с ограничением по длине месяца)"""
    year = day.year + (1 if day.month == 12 else 0)
    month = 1 if day.month == 12 else day.month + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def matches_text(card: Card, search_text: str) -> bool:
    return search_text.lower() in card.title.lower()


def matches_members(card: Card, member_ids: List[str]) -> bool:
    if not member_ids:
        return True
    card_member_ids = card.member_user_ids
    for member_id in member_ids:
        if member_id == UNASSIGNED:
            if not card_member_ids:
                return True
        elif member_id in card_member_ids:
            return True
    return False


def matches_due_date(card: Card, due_filter: Optional[DueDateFilter], today: date) -> bool:
    if due_filter is None:
        return True
    if due_filter == DueDateFilter.NO_DATE:
        return card.due_date is None
    if card.due_date is None:
        return False

    due = card.due_date.date()
    if due_filter == DueDateFilter.OVERDUE:
        return due < today
    if due_filter == DueDateFilter.TODAY:
        return due == today
    if due_filter == DueDateFilter.WEEK:
        return today <= due <= today + timedelta(days=7)
    if due_filter == DueDateFilter.MONTH:
        return today <= due <= add_month(today)
    return True


def card_matches(card: Card, criteria: FilterCriteria, today: date) -> bool:
    if not matches_text(card, criteria.search_text):
        return False
    if not matches_members(card, criteria.member_ids):
        return False
    if criteria.priorities and card.priority not in criteria.priorities:
        return False
    if criteria.tag_ids and not any(tag_id in card.tag_ids for tag_id in criteria.tag_ids):
        return False
    if criteria.story_points and card.story_points not in criteria.story_points:
        return False
    return matches_due_date(card, criteria.due_date, today)


def sort_by_priority(cards: List[Card], order: Optional[PrioritySort]) -> List[Card]:
    """Стабильная сортировка; карточки без приоритета имеют вес 0"""
    if order is None:
        return cards
    reverse = order == PrioritySort.URGENT_TO_LOW
    return sorted(cards, key=lambda card: card.priority.rank if card.priority else 0, reverse=reverse)


def filter_lists(snapshot: BoardSnapshot, criteria: Optional[FilterCriteria] = None,
                 today: Optional[date] = None) -> List[KanbanList]:
    """Отфильтрованные копии списков; порядок списков сохраняется"""
    criteria = criteria or FilterCriteria()
    today = today or date.today()

    projected = []
    for kanban_list in snapshot.lists:
        if kanban_list.is_archived:
            continue
        cards = [
            card for card in kanban_list.cards
            if not card.is_archived and card_matches(card, criteria, today)
        ]
        cards = sort_by_priority(cards, criteria.priority_sort)
        projected.append(kanban_list.model_copy(update={'cards': cards}))
    return projected


def filter_board(snapshot: BoardSnapshot, criteria: Optional[FilterCriteria] = None,
                 today: Optional[date] = None) -> FilteredBoard:
    lists = filter_lists(snapshot, criteria, today)
    return FilteredBoard(
        lists=lists,
        visible_cards=sum(len(kanban_list.cards) for kanban_list in lists),
        total_cards=len(snapshot.all_cards()),
    )
