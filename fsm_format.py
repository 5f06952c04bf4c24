from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Set

from fsm_geometry import grid_position
from fsm_model import StateGraph

_STATES_LINE = re.compile(r"states:\s*(.*)", re.IGNORECASE)
_START_LINE = re.compile(r"start:\s*([\w-]+)", re.IGNORECASE)
_FINALS_LINE = re.compile(r"finals:\s*(.*)", re.IGNORECASE)
_TRANSITION_LINE = re.compile(r"([\w-]+)\s*->\s*([\w-]+)\s*\(([^)]*)\)", re.IGNORECASE)


@dataclass
class ParsedTransition:
    source: str
    target: str
    labels: List[str] = field(default_factory=list)


@dataclass
class ParsedDefinition:
    """Результат разбора текста: имена, а не объекты графа."""

    states: List[str] = field(default_factory=list)
    start: Optional[str] = None
    finals: Set[str] = field(default_factory=set)
    transitions: List[ParsedTransition] = field(default_factory=list)


def format_definition(graph: StateGraph) -> str:
    """Формирует текстовое описание автомата по графу.

    Формат:
    Start: q0
    Finals: q1
    Alphabet: a b
    States: q0 q1

    Transitions:
    q0 -> q1 (a)
    q1 -> q1 (b)
    """
    lines: List[str] = []

    start = graph.start_state()
    if start is not None:
        lines.append(f"Start: {start.name}")

    finals = graph.final_states()
    if finals:
        lines.append("Finals: " + " ".join(s.name for s in finals))

    alphabet = graph.alphabet()
    if alphabet:
        lines.append("Alphabet: " + " ".join(alphabet))

    if graph.states:
        lines.append("States: " + " ".join(s.name for s in graph.states))
        lines.append("")

    lines.append("Transitions:")
    for t in graph.transitions:
        lines.append(f"{t.source.name} -> {t.target.name} ({' '.join(t.labels)})")

    return "\n".join(lines) + "\n"


def _tokens(text: str) -> List[str]:
    return [tok for tok in text.split() if tok]


def parse_definition(text: str) -> ParsedDefinition:
    """Терпимый построчный разбор; непонятные строки молча пропускаются."""
    parsed = ParsedDefinition()
    in_transitions = False

    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.lower().startswith("transitions"):
            in_transitions = True
            continue

        if not in_transitions:
            m_states = _STATES_LINE.fullmatch(line)
            m_start = _START_LINE.fullmatch(line)
            m_finals = _FINALS_LINE.fullmatch(line)
            if m_states:
                parsed.states.extend(_tokens(m_states.group(1)))
            elif m_start:
                parsed.start = m_start.group(1)
            elif m_finals:
                parsed.finals.update(_tokens(m_finals.group(1)))
            continue

        m = _TRANSITION_LINE.fullmatch(line)
        if not m:
            continue
        source, target = m.group(1), m.group(2)
        parsed.transitions.append(ParsedTransition(source, target, _tokens(m.group(3))))
        # Концы дуги автоматически добавляются в список состояний
        for name in (source, target):
            if name not in parsed.states:
                parsed.states.append(name)

    if parsed.start is None and parsed.states:
        parsed.start = parsed.states[0]

    return parsed


def build_graph(parsed: ParsedDefinition, graph: Optional[StateGraph] = None) -> StateGraph:
    """Строит граф по разобранному описанию, раскладывая состояния по сетке.

    Повторяющиеся пары (from, to) из текста сохраняются как параллельные дуги.
    """
    if graph is None:
        graph = StateGraph()
    else:
        graph.clear()

    names = list(dict.fromkeys(parsed.states))
    n = len(names)
    for idx, name in enumerate(names):
        state = graph.add_state(name, grid_position(idx, n))
        state.is_start = parsed.start is not None and parsed.start == name
        state.is_final = name in parsed.finals
    graph.seed_counter(parsed.states)

    for pt in parsed.transitions:
        source = graph.find_state(pt.source)
        target = graph.find_state(pt.target)
        if source is None or target is None:
            continue
        graph.add_transition(source, target, pt.labels, allow_duplicate=True)

    return graph


def load_definition(text: str, graph: Optional[StateGraph] = None) -> StateGraph:
    return build_graph(parse_definition(text), graph)
