from typing import Any, Dict, Optional

from models.board_snapshot import BoardSnapshot
from models.kanban_models import Board
from transformers.base_transformer import BaseTransformer
from transformers.list_transformer import ListTransformer
from utils.logger import get_logger

logger = get_logger(__name__)


class BoardTransformer(BaseTransformer):
    """
    Собирает BoardSnapshot из ответа FetchBoardData.
    Архивные списки и карточки отбрасываются, порядок - по position.
    """
    def __init__(self, list_transformer: Optional[ListTransformer] = None):
        self.list_transformer = list_transformer or ListTransformer()

    def transform(self, data: Dict[str, Any], **kwargs) -> BoardSnapshot:
        boards = data.get('kanban_boards') or []
        board = Board(**boards[0]) if boards else None
        if board is None:
            logger.warning("Ответ FetchBoardData не содержит доски")

        lists = [
            self.list_transformer.transform(raw_list)
            for raw_list in data.get('kanban_lists') or []
            if not raw_list.get('is_archived', False)
        ]
        lists.sort(key=lambda kanban_list: kanban_list.position)

        logger.debug(f"Снимок доски собран: {len(lists)} списков, "
                     f"{sum(len(kanban_list.cards) for kanban_list in lists)} карточек")
        return BoardSnapshot(board=board, lists=lists)
