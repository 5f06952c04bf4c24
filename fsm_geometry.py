from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from PySide6.QtCore import QPointF
from PySide6.QtGui import QPainterPath

STATE_RADIUS = 35
ANCHOR_SIZE = 10
ANCHOR_HIT_TOLERANCE = 2.3
GRID_SPACING = 120

CURVE_OFFSET_STEP = 40  # Смещение контрольной точки на один индекс
HIT_TOLERANCE = 8
SAMPLE_STEP = 0.05

ARROW_LENGTH = 12
ARROW_HALF_WIDTH = 5

ADD_BUTTON_WIDTH = 100
ADD_BUTTON_HEIGHT = 40


class Anchor(Enum):
    """Точки привязки на границе состояния."""

    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"


def anchor_position(state, anchor: Anchor) -> QPointF:
    """Возвращает точку на окружности состояния в заданном направлении."""
    x, y = state.position.x(), state.position.y()
    r = STATE_RADIUS
    if anchor == Anchor.NORTH:
        return QPointF(x, y - r)
    if anchor == Anchor.SOUTH:
        return QPointF(x, y + r)
    if anchor == Anchor.EAST:
        return QPointF(x + r, y)
    return QPointF(x - r, y)


def distance(a: QPointF, b: QPointF) -> float:
    return math.hypot(a.x() - b.x(), a.y() - b.y())


def arrowhead(tip: QPointF, angle: float, length: float = ARROW_LENGTH,
              half_width: float = ARROW_HALF_WIDTH) -> Tuple[QPointF, QPointF, QPointF]:
    """Треугольник наконечника: вершина и два "уса".

    Направление поворачивается на ± угол крыла, и из вершины делается шаг
    назад на длину гипотенузы (length, half_width).
    """
    wing = math.atan2(half_width, length)
    back = math.hypot(length, half_width)
    p1 = QPointF(
        tip.x() - back * math.cos(angle - wing),
        tip.y() - back * math.sin(angle - wing),
    )
    p2 = QPointF(
        tip.x() - back * math.cos(angle + wing),
        tip.y() - back * math.sin(angle + wing),
    )
    return tip, p1, p2


# --- Кривые ---

@dataclass(frozen=True)
class QuadCurve:
    """Квадратичная кривая Безье для дуги между разными состояниями."""

    p0: QPointF
    ctrl: QPointF
    p1: QPointF

    def point_at(self, t: float) -> QPointF:
        u = 1 - t
        x = u * u * self.p0.x() + 2 * u * t * self.ctrl.x() + t * t * self.p1.x()
        y = u * u * self.p0.y() + 2 * u * t * self.ctrl.y() + t * t * self.p1.y()
        return QPointF(x, y)

    def to_path(self) -> QPainterPath:
        path = QPainterPath(self.p0)
        path.quadTo(self.ctrl, self.p1)
        return path

    def arrow(self):
        # Наконечник направлен по касательной в конце кривой
        angle = math.atan2(self.p1.y() - self.ctrl.y(), self.p1.x() - self.ctrl.x())
        return arrowhead(self.p1, angle)

    def label_position(self) -> QPointF:
        return QPointF(self.ctrl)


@dataclass(frozen=True)
class CubicCurve:
    """Кубическая кривая Безье для петли."""

    p0: QPointF
    c1: QPointF
    c2: QPointF
    p1: QPointF

    def point_at(self, t: float) -> QPointF:
        u = 1 - t
        a, b, c, d = u ** 3, 3 * u * u * t, 3 * u * t * t, t ** 3
        x = a * self.p0.x() + b * self.c1.x() + c * self.c2.x() + d * self.p1.x()
        y = a * self.p0.y() + b * self.c1.y() + c * self.c2.y() + d * self.p1.y()
        return QPointF(x, y)

    def to_path(self) -> QPainterPath:
        path = QPainterPath(self.p0)
        path.cubicTo(self.c1, self.c2, self.p1)
        return path

    def arrow(self):
        # Стрелка на правой ветви петли, остриё смещено внутрь, к центру состояния
        base = self.point_at(0.83)
        raw_tip = self.point_at(0.94)
        tip = QPointF(raw_tip.x() - 4, raw_tip.y() + 14)
        angle = math.atan2(tip.y() - base.y(), tip.x() - base.x())
        return arrowhead(tip, angle)

    def label_position(self) -> QPointF:
        # Над вершиной петли
        return QPointF((self.c1.x() + self.c2.x()) / 2, self.c1.y() + 8)


def edge_curve(start: QPointF, end: QPointF, offset_index: int, flip: bool = False) -> QuadCurve:
    """Строит дугу между двумя состояниями.

    Контрольная точка — середина отрезка, сдвинутая вдоль нормали на
    offset_index * CURVE_OFFSET_STEP. При flip знак сдвига меняется, чтобы
    встречные дуги расходились в разные стороны.
    """
    # Нормаль не зависит от направления дуги: концы упорядочены по (x, y)
    a, b = sorted(((start.x(), start.y()), (end.x(), end.y())))
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    dist = max(1.0, math.hypot(dx, dy))
    nx = -dy / dist
    ny = dx / dist

    offset = offset_index * CURVE_OFFSET_STEP
    if flip:
        offset = -offset

    ctrl = QPointF(
        (start.x() + end.x()) / 2 + nx * offset,
        (start.y() + end.y()) / 2 + ny * offset,
    )
    return QuadCurve(QPointF(start), ctrl, QPointF(end))


def self_loop_curve(state, offset_index: int) -> CubicCurve:
    """Петля над верхней точкой состояния; с ростом индекса шире и выше."""
    top = anchor_position(state, Anchor.NORTH)
    spread = STATE_RADIUS / 2 - 2 + offset_index * 4
    lift = STATE_RADIUS + 8 + offset_index * 5
    rim_y = top.y() - 6  # Ближе к контуру состояния

    return CubicCurve(
        QPointF(top.x() - spread, rim_y),
        QPointF(top.x() - spread, rim_y - lift),
        QPointF(top.x() + spread, rim_y - lift),
        QPointF(top.x() + spread, rim_y),
    )


def hit_test_curve(curve, point: QPointF, sample_step: float = SAMPLE_STEP,
                   tolerance: float = HIT_TOLERANCE) -> bool:
    """Приближённая проверка попадания: выборка точек кривой с шагом по t."""
    steps = int(math.ceil(1.0 / sample_step - 1e-9))
    for i in range(steps + 1):
        # последняя выборка всегда t = 1
        if distance(curve.point_at(min(i * sample_step, 1.0)), point) < tolerance:
            return True
    return False


# --- Попадания в состояния и раскладка ---

def point_in_state(state, point: QPointF) -> bool:
    return distance(point, state.position) <= STATE_RADIUS


def anchor_at(state, point: QPointF):
    """Возвращает точку привязки под курсором или None."""
    for anchor in Anchor:
        if distance(point, anchor_position(state, anchor)) <= ANCHOR_SIZE * ANCHOR_HIT_TOLERANCE:
            return anchor
    return None


def grid_position(index: int, count: int) -> QPointF:
    """Позиция по квадратной сетке (columns = ceil(sqrt(count))), построчно."""
    cols = max(1, math.ceil(math.sqrt(count)))
    row, col = divmod(index, cols)
    return QPointF(GRID_SPACING + col * GRID_SPACING, GRID_SPACING + row * GRID_SPACING)


def add_button_center(width: int, height: int):
    """Центр кнопки "добавить состояние"; None, если холст слишком мал."""
    if width > 100 and height > 100:
        return QPointF(width // 2, height // 2)
    return None


def point_on_add_button(center, point: QPointF) -> bool:
    if center is None:
        return False
    return (abs(point.x() - center.x()) <= ADD_BUTTON_WIDTH / 2
            and abs(point.y() - center.y()) <= ADD_BUTTON_HEIGHT / 2)
