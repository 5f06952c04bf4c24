"""
Контроллер взаимодействия с холстом автомата.

Режимы: Idle, DraggingState, PendingConnection. Каждый обработчик событий
указателя возвращает список эффектов, которые исполняет виджет: перерисовка,
новый текст описания, сообщение об ошибке, запрос меток, контекстное меню.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from PySide6.QtCore import QPointF

from fsm_geometry import (
    Anchor,
    add_button_center,
    anchor_at,
    point_on_add_button,
)
from fsm_model import DuplicateTransitionError, State, StateGraph, Transition, split_labels
from fsm_format import format_definition, load_definition
from fsm_layout import spring_positions
from fsm_logging import log_event, log_state_snapshot

DEFAULT_LABEL = "a"
LABEL_PROMPT = "Метки перехода:"


class PointerButton(Enum):
    LEFT = "left"
    RIGHT = "right"


# --- Режимы ---

@dataclass
class Idle:
    pass


@dataclass
class DraggingState:
    state: State
    offset: QPointF


@dataclass
class PendingConnection:
    state: State
    anchor: Anchor
    cursor: QPointF


# --- Эффекты ---

@dataclass(frozen=True)
class Repaint:
    pass


@dataclass(frozen=True)
class DefinitionChanged:
    text: str


@dataclass(frozen=True)
class ShowError:
    title: str
    message: str


@dataclass(frozen=True)
class RequestLabel:
    title: str
    default: str


@dataclass(frozen=True)
class ShowMenu:
    kind: str  # "state", "transition" или "empty"
    target: object
    position: QPointF


# --- Отложенные запросы меток ---

@dataclass
class _CreateTransition:
    source: State
    target: State
    source_anchor: Anchor
    target_anchor: Anchor


@dataclass
class _CreateSelfLoop:
    state: State


@dataclass
class _EditLabels:
    transition: Transition


class CanvasController:
    """Единственный владелец графа; все изменения идут через него."""

    def __init__(self, graph: Optional[StateGraph] = None):
        self.graph = graph if graph is not None else StateGraph()
        self.mode = Idle()
        self.pending_request = None
        self.hover_add_button = False
        self.width = 0
        self.height = 0

    # --- Общие вспомогательные методы ---

    def definition(self) -> str:
        return format_definition(self.graph)

    def _changed(self, message: str) -> list:
        log_event(message)
        return [Repaint(), DefinitionChanged(self.definition())]

    def set_viewport(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def add_button_position(self) -> Optional[QPointF]:
        """Кнопка "добавить состояние" видна только на пустом холсте."""
        if not self.graph.is_empty():
            return None
        return add_button_center(self.width, self.height)

    def rubber_band(self):
        """(состояние, привязка, курсор) для предпросмотра новой дуги или None."""
        if isinstance(self.mode, PendingConnection):
            return self.mode.state, self.mode.anchor, self.mode.cursor
        return None

    def load_text(self, text: str) -> list:
        """Заменяет граф описанием из текста; прежние позиции не сохраняются."""
        self.mode = Idle()
        self.pending_request = None
        load_definition(text, self.graph)
        log_state_snapshot("Автомат загружен из текста", self.graph)
        return [Repaint()]

    def auto_arrange(self) -> list:
        """Силовая раскладка состояний под текущий размер холста."""
        if self.graph.is_empty() or not isinstance(self.mode, Idle):
            return []
        positions = spring_positions(self.graph, self.width, self.height)
        return self.restore_positions(positions, "Состояния разложены автоматически.")

    def restore_positions(self, positions, message: str = "Позиции состояний восстановлены.") -> list:
        """Переносит позиции по именам состояний; неизвестные имена пропускаются."""
        for s in self.graph.states:
            if s.name in positions:
                s.position = QPointF(positions[s.name])
        return self._changed(message)

    # --- События указателя ---

    def press(self, point: QPointF, button: PointerButton = PointerButton.LEFT) -> list:
        if not isinstance(self.mode, Idle):
            return []

        if button == PointerButton.LEFT and point_on_add_button(self.add_button_position(), point):
            return self.add_state_at(self.add_button_position())

        hit = self.graph.state_at(point)
        if hit is not None:
            if button == PointerButton.RIGHT:
                return [ShowMenu("state", hit, QPointF(point))]
            anchor = anchor_at(hit, point)
            if anchor is not None:
                self.mode = PendingConnection(hit, anchor, QPointF(point))
            else:
                offset = QPointF(point.x() - hit.position.x(), point.y() - hit.position.y())
                self.mode = DraggingState(hit, offset)
            return []

        if button == PointerButton.RIGHT:
            transition = self.graph.transition_at(point)
            if transition is not None:
                return [ShowMenu("transition", transition, QPointF(point))]
            return [ShowMenu("empty", None, QPointF(point))]
        return []

    def move(self, point: QPointF) -> list:
        mode = self.mode
        if isinstance(mode, PendingConnection):
            mode.cursor = QPointF(point)
            return [Repaint()]
        if isinstance(mode, DraggingState):
            mode.state.position = QPointF(point.x() - mode.offset.x(), point.y() - mode.offset.y())
            return [Repaint(), DefinitionChanged(self.definition())]

        was_hover = self.hover_add_button
        self.hover_add_button = point_on_add_button(self.add_button_position(), point)
        if was_hover != self.hover_add_button:
            return [Repaint()]
        return []

    def release(self, point: QPointF) -> list:
        mode = self.mode
        self.mode = Idle()

        if isinstance(mode, DraggingState):
            log_event(f"Состояние {mode.state.name} перемещено.")
            return []
        if not isinstance(mode, PendingConnection):
            return []

        effects: list = [Repaint()]
        target = self.graph.state_at(point)
        anchor = anchor_at(target, point) if target is not None else None
        if anchor is None:
            return effects

        if self.graph.has_transition(mode.state, target):
            effects.append(ShowError(
                "Повторяющийся переход",
                str(DuplicateTransitionError(mode.state.name, target.name)),
            ))
            return effects

        self.pending_request = _CreateTransition(mode.state, target, mode.anchor, anchor)
        effects.append(RequestLabel(LABEL_PROMPT, DEFAULT_LABEL))
        return effects

    def submit_label(self, text: Optional[str]) -> list:
        """Результат запроса меток; None или ввод без меток означает отмену."""
        request = self.pending_request
        self.pending_request = None
        if request is None or text is None:
            return []
        labels = split_labels(text)
        if not labels:
            return []

        try:
            if isinstance(request, _CreateTransition):
                t = self.graph.add_transition(
                    request.source, request.target, labels,
                    request.source_anchor, request.target_anchor,
                )
                return self._changed(f"Добавлен переход {t.source.name} -> {t.target.name} ({' '.join(labels)}).")
            if isinstance(request, _CreateSelfLoop):
                self.graph.add_transition(request.state, request.state, labels, Anchor.NORTH, Anchor.NORTH)
                return self._changed(f"Добавлена петля на {request.state.name} ({' '.join(labels)}).")
        except DuplicateTransitionError as e:
            return [ShowError("Повторяющийся переход", str(e))]

        t = request.transition
        if t not in self.graph.transitions:
            return []
        self.graph.set_labels(t, labels)
        return self._changed(f"Изменены метки перехода {t.source.name} -> {t.target.name}.")

    # --- Действия контекстного меню ---

    def add_state_at(self, point: QPointF) -> list:
        state = self.graph.new_state(point)
        self.hover_add_button = False
        return self._changed(f"Добавлено состояние {state.name}.")

    def set_start(self, state: State) -> list:
        self.graph.set_start(state)
        return self._changed(f"Начальное состояние: {state.name}.")

    def toggle_final(self, state: State) -> list:
        self.graph.toggle_final(state)
        kind = "конечное" if state.is_final else "не конечное"
        return self._changed(f"Состояние {state.name} теперь {kind}.")

    def request_self_loop(self, state: State) -> list:
        self.pending_request = _CreateSelfLoop(state)
        return [RequestLabel(LABEL_PROMPT, DEFAULT_LABEL)]

    def delete_state(self, state: State) -> list:
        self.graph.remove_state(state)
        return self._changed(f"Удалено состояние {state.name} и его переходы.")

    def request_edit_transition(self, transition: Transition) -> list:
        self.pending_request = _EditLabels(transition)
        return [RequestLabel(LABEL_PROMPT, " ".join(transition.labels))]

    def delete_transition(self, transition: Transition) -> list:
        self.graph.remove_transition(transition)
        return self._changed(f"Удалён переход {transition.source.name} -> {transition.target.name}.")
