"""Tests for the definition text parser, serializer and loader."""

from PySide6.QtCore import QPointF

from fsm_format import build_graph, format_definition, load_definition, parse_definition
from fsm_model import StateGraph


def triples(graph):
    return [(t.source.name, t.target.name, list(t.labels)) for t in graph.transitions]


class TestParse:
    def test_example_definition(self, example_text):
        parsed = parse_definition(example_text)

        assert parsed.states == ["q0", "q1"]
        assert parsed.start == "q0"
        assert parsed.finals == {"q1"}
        assert [(t.source, t.target, t.labels) for t in parsed.transitions] == [
            ("q0", "q1", ["a"]),
            ("q1", "q1", ["b"]),
        ]

    def test_comments_blank_and_garbage_lines_skipped(self):
        text = (
            "# automaton\n"
            "\n"
            "this is not a header\n"
            "States: a b\n"
            "Alphabet: x y\n"
            "Transitions:\n"
            "# comment inside transitions\n"
            "a -> b x\n"
            "a -> b (x y)\n"
            "nonsense\n"
        )
        parsed = parse_definition(text)

        assert parsed.states == ["a", "b"]
        assert [(t.source, t.target, t.labels) for t in parsed.transitions] == [("a", "b", ["x", "y"])]

    def test_headers_are_case_insensitive(self):
        parsed = parse_definition("STATES: s1 s2\nstart: s2\nFINALS: s1 s2\nTRANSITIONS\ns1->s2(  a   b )\n")

        assert parsed.states == ["s1", "s2"]
        assert parsed.start == "s2"
        assert parsed.finals == {"s1", "s2"}
        assert parsed.transitions[0].labels == ["a", "b"]

    def test_missing_start_falls_back_to_first_state(self):
        parsed = parse_definition("States: x y\n")
        assert parsed.start == "x"

    def test_transition_endpoints_are_added_as_states(self):
        parsed = parse_definition("States: a\nTransitions:\nb -> c (0)\na -> b (1)\n")
        assert parsed.states == ["a", "b", "c"]

    def test_hyphenated_names(self):
        parsed = parse_definition("Transitions:\nstate-1 -> state-2 (go)\n")
        assert parsed.states == ["state-1", "state-2"]
        assert parsed.start == "state-1"

    def test_header_lines_after_transitions_are_ignored(self):
        parsed = parse_definition("Transitions:\nq0 -> q1 (a)\nStart: q1\n")
        assert parsed.start == "q0"

    def test_empty_text(self):
        parsed = parse_definition("")
        assert parsed.states == []
        assert parsed.start is None
        assert parsed.transitions == []

    def test_empty_label_list(self):
        parsed = parse_definition("Transitions:\nq0 -> q1 ()\n")
        assert parsed.transitions[0].labels == []


class TestFormat:
    def test_example_graph(self, example_graph):
        assert format_definition(example_graph) == (
            "Start: q0\n"
            "Finals: q1\n"
            "Alphabet: a b\n"
            "States: q0 q1\n"
            "\n"
            "Transitions:\n"
            "q0 -> q1 (a)\n"
            "q1 -> q1 (b)\n"
        )

    def test_empty_graph(self):
        assert format_definition(StateGraph()) == "Transitions:\n"

    def test_optional_blocks_omitted(self):
        graph = StateGraph()
        graph.add_state("s", QPointF(0, 0))
        assert format_definition(graph) == "States: s\n\nTransitions:\n"

    def test_transitions_keep_creation_order(self, two_states):
        graph, a, b = two_states
        graph.add_transition(b, a, ["y"])
        graph.add_transition(a, b, ["x", "z"])
        text = format_definition(graph)
        assert text.endswith("Transitions:\nq1 -> q0 (y)\nq0 -> q1 (x z)\n")


class TestLoad:
    def test_example_load(self, example_graph):
        q0 = example_graph.find_state("q0")
        q1 = example_graph.find_state("q1")

        assert len(example_graph.states) == 2
        assert q0.is_start and not q0.is_final
        assert q1.is_final and not q1.is_start

        edge, loop = example_graph.transitions
        assert (edge.source, edge.target, edge.labels) == (q0, q1, ["a"])
        assert loop.is_self_loop and loop.source is q1 and loop.labels == ["b"]
        assert edge.offset_index == 0
        assert loop.offset_index == 0

    def test_grid_layout(self):
        graph = load_definition("States: a b c d e\n")
        positions = [(s.position.x(), s.position.y()) for s in graph.states]
        assert positions == [(120, 120), (240, 120), (360, 120), (120, 240), (240, 240)]

    def test_repeated_state_names_leave_no_grid_hole(self):
        graph = load_definition("States: a a b\n")
        assert [s.name for s in graph.states] == ["a", "b"]
        positions = [(s.position.x(), s.position.y()) for s in graph.states]
        assert positions == [(120, 120), (240, 120)]

    def test_reload_discards_previous_positions(self, example_text):
        graph = load_definition(example_text)
        graph.find_state("q0").position = QPointF(999, 999)
        load_definition(example_text, graph)
        assert graph.find_state("q0").position.x() == 120

    def test_counter_seeded_from_names(self):
        graph = load_definition("States: q3 foo q1\n")
        assert graph.new_state(QPointF(0, 0)).name == "q4"

    def test_undeclared_start_marks_nothing(self):
        graph = load_definition("Start: zz\nStates: a b\n")
        assert graph.start_state() is None

    def test_duplicate_pairs_kept_as_parallel_edges(self):
        graph = load_definition("Transitions:\nq0 -> q1 (a)\nq0 -> q1 (b)\n")

        assert triples(graph) == [("q0", "q1", ["a"]), ("q0", "q1", ["b"])]
        assert [t.offset_index for t in graph.transitions] == [0, 1]

    def test_reciprocal_edges_get_distinct_offsets(self):
        graph = load_definition("Transitions:\nq0 -> q1 (a)\nq1 -> q0 (b)\n")
        assert [t.offset_index for t in graph.transitions] == [0, 1]

    def test_round_trip(self):
        text = (
            "Start: s1\n"
            "Finals: s2 s3\n"
            "States: s1 s2 s3\n"
            "\n"
            "Transitions:\n"
            "s1 -> s2 (b a)\n"
            "s2 -> s1 (c)\n"
            "s3 -> s3 (a a)\n"
            "s2 -> s3 (d)\n"
        )
        first = load_definition(text)
        second = load_definition(format_definition(first))

        assert [s.name for s in second.states] == [s.name for s in first.states]
        assert second.start_state().name == "s1"
        assert {s.name for s in second.final_states()} == {"s2", "s3"}
        assert triples(second) == triples(first)

    def test_build_graph_reuses_given_graph(self, example_text):
        graph = StateGraph()
        result = build_graph(parse_definition(example_text), graph)
        assert result is graph
        assert len(graph.states) == 2
