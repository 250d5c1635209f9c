"""
Модели результатов: ответ RemoteStore и единый результат мутации.
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel

from models.kanban_models import Card, CardAttachment, CardMember, KanbanList


class RemoteResult(BaseModel):
    """Контракт RemoteStore: либо data, либо error"""
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class MoveState(str, Enum):
    IDLE = "idle"
    OPTIMISTICALLY_APPLIED = "optimistically_applied"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


class MutationResult(BaseModel):
    success: bool
    message: Optional[str] = None
    card: Optional[Card] = None
    kanban_list: Optional[KanbanList] = None
    attachment: Optional[CardAttachment] = None
    members: Optional[List[CardMember]] = None
    state: Optional[MoveState] = None

    @classmethod
    def succeeded(cls, **payload) -> "MutationResult":
        return cls(success=True, **payload)

    @classmethod
    def failed(cls, message: str, **payload) -> "MutationResult":
        return cls(success=False, message=message, **payload)
