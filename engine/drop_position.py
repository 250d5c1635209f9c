"""
Определение индекса вставки при перетаскивании по правилу середины.

Геометрия передается явно (прямоугольники карточек в порядке отображения),
поэтому результат детерминирован и проверяется без настоящих событий DnD.
"""

from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class Rect:
    top: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def midpoint(self) -> float:
        return self.top + self.height / 2


def resolve_drop_index(pointer_y: float, rects: Sequence[Rect]) -> int:
    """
    Индекс вставки для вертикальной координаты указателя.

    Выше середины первой карточки -> 0, ниже середины последней -> len(rects),
    иначе - первый промежуток, середину которого указатель еще не пересек.
    """
    if not rects:
        return 0

    if pointer_y < rects[0].midpoint:
        return 0

    if pointer_y > rects[-1].midpoint:
        return len(rects)

    for i in range(len(rects) - 1):
        current, following = rects[i], rects[i + 1]
        gap_midpoint = current.bottom + (following.top - current.bottom) / 2
        if pointer_y < gap_midpoint:
            return i + 1

    return len(rects)
