#!/usr/bin/env python3
"""
Консольный клиент доски: просмотр с фильтрами, перемещение карточек
и изменение порядка списков через RemoteStore.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Добавляем корневую директорию в путь для импорта модулей
sys.path.append(str(Path(__file__).parent.parent))

from connectors.graphql_client import GraphQLClient
from coordinators.kanban_coordinator import KanbanCoordinator
from views.filter_view import FilterCriteria, filter_board
from utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Работа с Kanban-доской")
    parser.add_argument("--user", help="ID текущего пользователя")
    parser.add_argument("--log-level", help="Уровень логирования в консоли (DEBUG, INFO, ...)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Показать доску")
    show.add_argument("board_id")
    show.add_argument("--search", default="", help="Подстрока в названии карточки")
    show.add_argument("--member", action="append", default=[],
                      help="ID участника (или 'unassigned'), можно несколько")

    move = subparsers.add_parser("move", help="Переместить карточку")
    move.add_argument("board_id")
    move.add_argument("card_id")
    move.add_argument("target_list_id")
    move.add_argument("index", type=int)

    reorder = subparsers.add_parser("reorder-list", help="Переместить список")
    reorder.add_argument("board_id")
    reorder.add_argument("list_id")
    reorder.add_argument("index", type=int)

    return parser


def print_board(coordinator: KanbanCoordinator, criteria: FilterCriteria) -> None:
    snapshot = coordinator.state.snapshot
    view = filter_board(snapshot, criteria)

    title = snapshot.board.name if snapshot.board else "(без названия)"
    logger.info("=" * 70)
    logger.info(f"📋 {title}: {view.visible_cards} из {view.total_cards} карточек")
    for kanban_list in view.lists:
        flags = " [final]" if kanban_list.is_final else ""
        logger.info(f"  {kanban_list.position}. {kanban_list.name}{flags} ({len(kanban_list.cards)})")
        for card in kanban_list.cards:
            mark = "✅" if card.is_completed else "▫️"
            logger.info(f"      {mark} {card.position}. {card.title} [{card.id}]")
    logger.info("=" * 70)


async def main(argv=None) -> bool:
    args = build_parser().parse_args(argv)
    if args.log_level:
        configure_logging(level=args.log_level.upper())

    coordinator = KanbanCoordinator(GraphQLClient(), current_user_id=args.user)

    loaded = await coordinator.fetch_board_data(args.board_id)
    if not loaded.success:
        logger.error(f"❌ Не удалось загрузить доску: {loaded.message}")
        return False

    if args.command == "show":
        print_board(coordinator, FilterCriteria(search_text=args.search, member_ids=args.member))
        return True

    if args.command == "move":
        location = coordinator.state.snapshot.find_card_location(args.card_id)
        if location is None:
            logger.error(f"❌ Карточка {args.card_id} не найдена на доске")
            return False
        source, _ = location
        result = await coordinator.move_card(args.card_id, source.id, args.target_list_id, args.index)
    else:
        result = await coordinator.reorder_lists(args.list_id, args.index)

    if not result.success:
        logger.error(f"❌ Операция не выполнена: {result.message}")
        return False

    print_board(coordinator, FilterCriteria())
    return True


if __name__ == "__main__":
    success = asyncio.run(main())
    if not success:
        sys.exit(1)
