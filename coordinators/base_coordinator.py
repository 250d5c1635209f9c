import asyncio
import contextlib
import functools
from typing import Any, Callable, Dict, Optional

from config.settings import settings
from connectors.operations import RESULT_KEYS
from connectors.remote_store import RemoteStore
from models.board_snapshot import BoardState
from models.kanban_models import Card
from models.result_models import MutationResult, RemoteResult
from utils.logger import get_logger

logger = get_logger(__name__)


def coordinator_boundary(func):
    """
    Граница координатора: непредвиденное исключение превращается
    в обычный неуспешный MutationResult.
    """
    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except Exception as e:
            logger.exception(f"💥 Непредвиденная ошибка в {func.__name__}: {e}")
            self.stats['failed'] += 1
            self.state.set_error(str(e))
            return MutationResult.failed(f"Unexpected error: {e}")
    return wrapper


class BaseCoordinator:
    """
    Общая часть координаторов мутаций: вызов RemoteStore с таймаутом,
    сериализация мутаций, статистика и единый формат результата.
    """
    def __init__(self,
                 remote: RemoteStore,
                 current_user_id: Optional[str] = None,
                 state: Optional[BoardState] = None,
                 mutation_timeout: Optional[float] = settings.mutation_timeout,
                 lock: Optional[asyncio.Lock] = None):
        self.remote = remote
        self.current_user_id = current_user_id
        self.state = state if state is not None else BoardState()
        self.mutation_timeout = mutation_timeout

        if lock is None and settings.serialize_mutations:
            lock = asyncio.Lock()
        self.lock = lock

        self.stats = {
            'remote_calls': 0,
            'succeeded': 0,
            'failed': 0,
            'rolled_back': 0,
            'side_effect_errors': 0,
        }

    @classmethod
    def sharing(cls, other: "BaseCoordinator", **kwargs):
        """Создает координатор, разделяющий состояние, блокировку и статистику с other"""
        coordinator = cls(
            other.remote,
            current_user_id=other.current_user_id,
            state=other.state,
            mutation_timeout=other.mutation_timeout,
            lock=other.lock,
            **kwargs
        )
        coordinator.stats = other.stats
        return coordinator

    def _guard(self):
        return self.lock if self.lock is not None else contextlib.nullcontext()

    async def _execute(self, operation: str, variables: Dict[str, Any], record_error: bool = True) -> RemoteResult:
        """
        Вызывает RemoteStore. Истечение mutation_timeout считается ошибкой RemoteStore.
        """
        self.stats['remote_calls'] += 1
        logger.debug(f"➡️ {operation}: {variables}")

        try:
            if self.mutation_timeout:
                result = await asyncio.wait_for(self.remote.execute(operation, variables),
                                                timeout=self.mutation_timeout)
            else:
                result = await self.remote.execute(operation, variables)
        except asyncio.TimeoutError:
            result = RemoteResult(error=f"{operation} timed out after {self.mutation_timeout}s")

        if not result.ok:
            logger.error(f"❌ {operation} завершилась ошибкой: {result.error}")
            if record_error:
                self.state.set_error(result.error)
        return result

    @staticmethod
    def _payload(result: RemoteResult, operation: str) -> Any:
        return (result.data or {}).get(RESULT_KEYS[operation])

    def _reject(self, message: str, **payload) -> MutationResult:
        """Отказ без обращения к RemoteStore (валидация, отсутствующий объект)"""
        logger.warning(f"⚠️ Отклонено: {message}")
        self.stats['failed'] += 1
        self.state.set_error(message)
        return MutationResult.failed(message, **payload)

    def _fail(self, message: str, **payload) -> MutationResult:
        self.stats['failed'] += 1
        return MutationResult.failed(message, **payload)

    def _succeed(self, **payload) -> MutationResult:
        self.stats['succeeded'] += 1
        return MutationResult.succeeded(**payload)

    def _require_user(self) -> Optional[MutationResult]:
        if not self.current_user_id:
            return self._reject("User not authenticated")
        return None

    def _replace_card(self, card_id: str, func: Callable[[Card], Card]) -> Optional[Card]:
        """Заменяет карточку в текущем снимке результатом func(card)"""
        snapshot = self.state.snapshot
        location = snapshot.find_card_location(card_id)
        if location is None:
            return None

        kanban_list, index = location
        updated = func(kanban_list.cards[index])
        cards = list(kanban_list.cards)
        cards[index] = updated
        self.state.commit(snapshot.with_list_cards(kanban_list.id, cards))
        return updated
