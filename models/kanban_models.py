from __future__ import annotations
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from datetime import datetime


class Priority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        """Порядковый вес приоритета: low=1 ... urgent=4"""
        return PRIORITY_RANK[self]


PRIORITY_RANK = {
    Priority.LOW: 1,
    Priority.NORMAL: 2,
    Priority.HIGH: 3,
    Priority.URGENT: 4,
}


class Board(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    background_color: Optional[str] = None
    background_image_url: Optional[str] = None


class CardMember(BaseModel):
    """Назначенный на карточку участник"""
    id: str
    user_id: str
    card_id: Optional[str] = None
    fullname: Optional[str] = None
    avatar_url: Optional[str] = None
    assigned_at: Optional[datetime] = None


class CardAttachment(BaseModel):
    id: str
    card_id: Optional[str] = None
    filename: Optional[str] = None
    original_filename: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    url: Optional[str] = None
    uploaded_by: Optional[str] = None
    created_at: Optional[datetime] = None


class Card(BaseModel):
    id: str
    title: str
    list_id: str
    position: int = 0
    description: Optional[str] = None
    cover_color: Optional[str] = None
    cover_image_url: Optional[str] = None
    due_date: Optional[datetime] = None
    story_points: Optional[int] = None
    priority: Optional[Priority] = None
    is_completed: bool = False
    is_archived: bool = False
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    # Связанные коллекции и денормализованные счетчики
    members: List[CardMember] = Field(default_factory=list)
    member_count: int = 0
    attachments: List[CardAttachment] = Field(default_factory=list)
    attachment_count: int = 0
    comment_ids: List[str] = Field(default_factory=list)
    tag_ids: List[str] = Field(default_factory=list)

    @field_validator('title')
    @classmethod
    def title_must_not_be_blank(cls, v):
        if not v or not v.strip():
            raise ValueError('Card title must not be empty')
        return v

    @property
    def comment_count(self) -> int:
        return len(self.comment_ids)

    @property
    def member_user_ids(self) -> List[str]:
        return [member.user_id for member in self.members]


class KanbanList(BaseModel):
    id: str
    name: str
    board_id: str
    position: int = 0
    color: Optional[str] = None
    confetti: bool = False
    is_final: bool = False
    is_archived: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    cards: List[Card] = Field(default_factory=list)

    def index_of(self, card_id: str) -> int:
        """Индекс карточки в списке или -1, если карточки здесь нет"""
        for index, card in enumerate(self.cards):
            if card.id == card_id:
                return index
        return -1


class PositionUpdate(BaseModel):
    """Новая позиция одного элемента (карточки или списка)"""
    id: str
    position: int
