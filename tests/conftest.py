"""Shared fixtures for tests."""

import pytest
from PySide6.QtCore import QPointF

import fsm_logging
from fsm_format import load_definition
from fsm_model import StateGraph

EXAMPLE_TEXT = (
    "Start: q0\n"
    "Finals: q1\n"
    "States: q0 q1\n"
    "\n"
    "Transitions:\n"
    "q0 -> q1 (a)\n"
    "q1 -> q1 (b)\n"
)


@pytest.fixture(autouse=True)
def log_file(tmp_path, monkeypatch):
    """Redirect the application log into a temporary directory."""
    path = tmp_path / "log.txt"
    monkeypatch.setattr(fsm_logging, "LOG_FILE", str(path))
    return path


@pytest.fixture
def example_text() -> str:
    return EXAMPLE_TEXT


@pytest.fixture
def example_graph() -> StateGraph:
    return load_definition(EXAMPLE_TEXT)


@pytest.fixture
def two_states():
    """A graph with q0 at (100, 100) and q1 at (300, 100)."""
    graph = StateGraph()
    a = graph.new_state(QPointF(100, 100))
    b = graph.new_state(QPointF(300, 100))
    return graph, a, b
