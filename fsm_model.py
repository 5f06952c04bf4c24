from __future__ import annotations

import re
from typing import Iterable, List, Optional

from PySide6.QtCore import QPointF

from fsm_geometry import (
    Anchor,
    anchor_position,
    edge_curve,
    self_loop_curve,
    hit_test_curve,
    point_in_state,
)

_DEFAULT_NAME = re.compile(r"q(\d+)")


class DuplicateTransitionError(ValueError):
    """Дуга для такой упорядоченной пары состояний уже существует."""

    def __init__(self, source_name: str, target_name: str):
        super().__init__(
            f"Переход между {source_name} и {target_name} уже существует.\n"
            "Нельзя создавать повторяющиеся переходы."
        )
        self.source_name = source_name
        self.target_name = target_name


class State:
    """Состояние автомата: имя, положение на холсте и флаги."""

    def __init__(self, name: str, position: QPointF, is_start: bool = False, is_final: bool = False):
        self.name = name
        self.position = QPointF(position)
        self.is_start = is_start
        self.is_final = is_final

    def __repr__(self):
        return f"State({self.name!r})"


class Transition:
    """Направленная дуга; ссылается на объекты State, а не на их копии."""

    def __init__(self, source: State, target: State, labels: Iterable[str],
                 source_anchor: Anchor = Anchor.EAST, target_anchor: Anchor = Anchor.WEST,
                 offset_index: int = 0):
        self.source = source
        self.target = target
        self.labels = list(labels)
        self.source_anchor = source_anchor
        self.target_anchor = target_anchor
        self.offset_index = offset_index

    @property
    def is_self_loop(self) -> bool:
        return self.source is self.target

    def __repr__(self):
        return f"Transition({self.source.name!r} -> {self.target.name!r}, {self.labels!r})"


def split_labels(text: str) -> List[str]:
    """Разбивает ввод пользователя на метки.

    Разделители: пробелы, запятые и скобки. Скобки в метке сломали бы
    строку перехода в текстовом описании.
    """
    return [part for part in re.split(r"[\s,()]+", text.strip()) if part]


def default_name_index(name: str) -> int:
    """Числовой суффикс имени вида qN, иначе 0."""
    m = _DEFAULT_NAME.fullmatch(name)
    return int(m.group(1)) if m else 0


class StateGraph:
    """Граф диаграммы: упорядоченные состояния и переходы."""

    def __init__(self):
        self.states: List[State] = []
        self.transitions: List[Transition] = []
        self.state_counter = 0  # Для имён q0, q1, ...

    def clear(self) -> None:
        self.states.clear()
        self.transitions.clear()
        self.state_counter = 0

    def is_empty(self) -> bool:
        return not self.states

    # --- Состояния ---

    def add_state(self, name: str, position: QPointF) -> State:
        state = State(name, position)
        self.states.append(state)
        return state

    def new_state(self, position: QPointF) -> State:
        """Добавляет состояние с автоматическим именем.

        Первое состояние пустого графа становится начальным.
        """
        name = f"q{self.state_counter}"
        self.state_counter += 1
        was_empty = self.is_empty()
        state = self.add_state(name, position)
        if was_empty:
            state.is_start = True
        return state

    def remove_state(self, state: State) -> None:
        """Удаляет состояние вместе со всеми инцидентными переходами."""
        self.transitions = [
            t for t in self.transitions if t.source is not state and t.target is not state
        ]
        self.states.remove(state)

    def find_state(self, name: str) -> Optional[State]:
        for s in self.states:
            if s.name == name:
                return s
        return None

    def set_start(self, state: State) -> None:
        for s in self.states:
            s.is_start = False
        state.is_start = True

    def toggle_final(self, state: State) -> None:
        state.is_final = not state.is_final

    def start_state(self) -> Optional[State]:
        for s in self.states:
            if s.is_start:
                return s
        return None

    def final_states(self) -> List[State]:
        return [s for s in self.states if s.is_final]

    def seed_counter(self, names: Iterable[str]) -> None:
        """Счётчик имён = 1 + максимальный суффикс среди загруженных qN."""
        for name in names:
            self.state_counter = max(self.state_counter, default_name_index(name) + 1)

    # --- Переходы ---

    def has_transition(self, source: State, target: State) -> bool:
        return any(t.source is source and t.target is target for t in self.transitions)

    def compute_offset_index(self, source: State, target: State) -> int:
        """max(число дуг в том же направлении, число встречных дуг)."""
        same_dir = 0
        opposite_dir = 0
        for t in self.transitions:
            if t.source is source and t.target is target:
                same_dir += 1
            elif t.source is target and t.target is source:
                opposite_dir += 1
        return max(same_dir, opposite_dir)

    def add_transition(self, source: State, target: State, labels: Iterable[str],
                       source_anchor: Anchor = Anchor.EAST, target_anchor: Anchor = Anchor.WEST,
                       allow_duplicate: bool = False) -> Transition:
        if not allow_duplicate and self.has_transition(source, target):
            raise DuplicateTransitionError(source.name, target.name)
        transition = Transition(source, target, labels, source_anchor, target_anchor)
        transition.offset_index = self.compute_offset_index(source, target)
        self.transitions.append(transition)
        return transition

    def remove_transition(self, transition: Transition) -> None:
        self.transitions.remove(transition)

    def set_labels(self, transition: Transition, labels: Iterable[str]) -> None:
        transition.labels[:] = list(labels)

    def has_reverse(self, transition: Transition) -> bool:
        return any(
            t.source is transition.target and t.target is transition.source
            for t in self.transitions
        )

    def alphabet(self) -> List[str]:
        """Метки всех переходов без повторов, в порядке появления."""
        seen = {}
        for t in self.transitions:
            for label in t.labels:
                seen.setdefault(label, None)
        return list(seen)

    # --- Геометрия и попадания ---

    def curve_for(self, transition: Transition):
        """Кривая перехода; общая для отрисовки и проверки попаданий."""
        if transition.is_self_loop:
            return self_loop_curve(transition.source, transition.offset_index)
        start = anchor_position(transition.source, transition.source_anchor)
        end = anchor_position(transition.target, transition.target_anchor)
        flip = self.has_reverse(transition) and transition.source.name > transition.target.name
        return edge_curve(start, end, transition.offset_index, flip)

    def state_at(self, point: QPointF) -> Optional[State]:
        for s in self.states:
            if point_in_state(s, point):
                return s
        return None

    def transition_at(self, point: QPointF) -> Optional[Transition]:
        for t in self.transitions:
            if hit_test_curve(self.curve_for(t), point):
                return t
        return None
