from typing import Dict

import networkx as nx
from PySide6.QtCore import QPointF

from fsm_geometry import STATE_RADIUS
from fsm_model import StateGraph


def graph_to_networkx(graph: StateGraph) -> nx.DiGraph:
    """Преобразует граф автомата в NetworkX DiGraph (петли и кратные дуги схлопываются)."""
    G = nx.DiGraph()
    for s in graph.states:
        G.add_node(s.name)
    for t in graph.transitions:
        if not t.is_self_loop:
            G.add_edge(t.source.name, t.target.name)
    return G


def normalize_positions(pos_dict, width: float, height: float) -> Dict[str, QPointF]:
    """Масштабирует позиции NetworkX под размер холста с центрированием."""
    if not pos_dict:
        return {}

    # Запас сверху под петли
    margin_x = STATE_RADIUS + 40
    margin_y = STATE_RADIUS + 60
    available_width = max(1.0, width - 2 * margin_x)
    available_height = max(1.0, height - 2 * margin_y)

    all_x = [pos[0] for pos in pos_dict.values()]
    all_y = [pos[1] for pos in pos_dict.values()]
    min_x, max_x = min(all_x), max(all_x)
    min_y, max_y = min(all_y), max(all_y)

    graph_width = max_x - min_x if max_x != min_x else 1
    graph_height = max_y - min_y if max_y != min_y else 1
    scale = min(available_width / graph_width, available_height / graph_height)

    center_x = (min_x + max_x) / 2
    center_y = (min_y + max_y) / 2

    return {
        node: QPointF((x - center_x) * scale + width / 2, (y - center_y) * scale + height / 2)
        for node, (x, y) in pos_dict.items()
    }


def spring_positions(graph: StateGraph, width: float, height: float, seed: int = 42) -> Dict[str, QPointF]:
    """Силовая раскладка (spring layout); детерминирована благодаря seed."""
    G = graph_to_networkx(graph)
    if G.number_of_nodes() == 0:
        return {}
    if G.number_of_nodes() == 1:
        return {next(iter(G.nodes())): QPointF(width / 2, height / 2)}
    pos = nx.spring_layout(G, k=2.0, iterations=50, seed=seed)
    return normalize_positions({node: (float(x), float(y)) for node, (x, y) in pos.items()}, width, height)
