"""
test_graph_text.py — Tests for the V/E interchange format

Round trips through text and files must preserve the graph and its
solution; every malformed line is reported with its line number.
"""

import pytest

from trialign.dag_core import solve_graph
from trialign.errors import MalformedInputError, ResourceExhaustedError
from trialign.graph_builder import build_alignment_graph
from trialign.graph_text import (
    format_weight,
    graph_to_text,
    parse_graph_text,
    read_graph_text,
    write_graph_text,
)


def _assert_same_graph(a, b):
    assert list(a.iter_vertices()) == list(b.iter_vertices())
    assert list(a.iter_edges()) == list(b.iter_edges())
    assert a.start_vertex == b.start_vertex
    assert a.end_vertex == b.end_vertex


class TestWriting:
    """Line layout of written graphs."""

    def test_smallest_graph_lines(self):
        g = build_alignment_graph(("A", "A", "A"), constrain_start=True, constrain_end=True)
        lines = graph_to_text(g).splitlines()
        assert lines[0] == "V 0,0,0 START"
        assert lines[7] == "V 1,1,1 END"
        assert lines[8].startswith("E ")
        assert "E AAA 0,0,0 1,1,1 12" in lines
        assert "E A-- 0,0,0 1,0,0 -12" in lines
        assert len(lines) == g.n_vertices + g.n_edges

    def test_vertices_precede_edges(self):
        g = build_alignment_graph(("AC", "A", "C"))
        kinds = [line[0] for line in graph_to_text(g).splitlines()]
        assert kinds == ["V"] * g.n_vertices + ["E"] * g.n_edges

    def test_start_and_end_on_one_vertex(self):
        g = build_alignment_graph(("", "", ""), constrain_start=True, constrain_end=True)
        assert graph_to_text(g) == "V 0,0,0 START END\n"

    def test_unconstrained_has_no_flags(self):
        text = graph_to_text(build_alignment_graph(("A", "C", "D")))
        assert "START" not in text
        assert "END" not in text

    @pytest.mark.parametrize("weight,expected", [
        (-12.0, "-12"),
        (0.0, "0"),
        (7.0, "7"),
        (0.5, "0.5"),
        (-1.25, "-1.25"),
    ])
    def test_format_weight(self, weight, expected):
        assert format_weight(weight) == expected


class TestRoundTrip:
    """Write then read gives an isomorphic graph with the same solution."""

    @pytest.mark.parametrize("start,end", [
        (False, False),
        (True, False),
        (False, True),
        (True, True),
    ])
    def test_text_round_trip(self, start, end):
        g = build_alignment_graph(
            ("HEAG", "PAW", "HE"), constrain_start=start, constrain_end=end
        )
        parsed = parse_graph_text(graph_to_text(g))
        _assert_same_graph(g, parsed)
        assert solve_graph(parsed).score == solve_graph(g).score
        assert solve_graph(parsed).path == solve_graph(g).path

    def test_file_round_trip(self, tmp_path):
        g = build_alignment_graph(("AC", "CA", "A"), constrain_start=True, constrain_end=True)
        path = write_graph_text(g, tmp_path / "graph.txt")
        assert path.exists()
        _assert_same_graph(g, read_graph_text(path))

    def test_wavefront_order_preserved(self):
        g = build_alignment_graph(("AC", "CA", "A"), order="wavefront")
        parsed = parse_graph_text(graph_to_text(g))
        assert list(parsed.iter_vertices()) == list(g.iter_vertices())
        assert solve_graph(parsed).score == solve_graph(g).score

    def test_fractional_weights(self):
        text = "V 0,0,0 START\nV 1,0,0 END\nE A-- 0,0,0 1,0,0 0.1\n"
        g = parse_graph_text(text)
        assert solve_graph(g).score == 0.1
        assert graph_to_text(g) == text

    def test_blank_lines_and_line_iterables(self):
        lines = ["\n", "V 0,0,0\n", "  \n", "V 1,1,1\n", "E AAA 0,0,0 1,1,1 12\n"]
        g = parse_graph_text(lines)
        assert g.n_vertices == 2
        assert g.n_edges == 1


class TestParseErrors:
    """Malformed lines raise MalformedInputError carrying the line number."""

    BAD_TEXT = [
        ("V 0,0,0\nE AAA 0,0,0 1,1,1 12\n", 2, "undeclared"),
        ("V 0,0,0\nV 0,0,0\n", 2, "declared twice"),
        ("V 0,0,0 START\nV 1,1,1 START\n", 2, "More than one START"),
        ("V 0,0,0 END\nV 1,1,1 END\n", 2, "More than one END"),
        ("V 0,0,0 FOO\n", 1, "Unknown vertex flag"),
        ("V\n", 1, "without coordinates"),
        ("V 0,0\n", 1, "triple"),
        ("V 0,a,0\n", 1, "non-integer"),
        ("V 0,0,-1\n", 1, "negative"),
        ("V 0,0,0\nV 1,1,1\nE AAA 0,0,0 1,1,1\n", 3, "5 fields"),
        ("V 0,0,0\nV 1,1,1\nE AA 0,0,0 1,1,1 3\n", 3, "3-symbol"),
        ("V 0,0,0\nV 1,1,1\nE AAA 0,0,0 1,1,1 abc\n", 3, "not a number"),
        ("V 0,0,0\nV 1,1,1\nE AAA 0,0,0 1,1,1 12\nV 2,2,2\n", 4, "after the first edge"),
        ("X 1\n", 1, "Unknown record type"),
        ("\nV 0,0,0\n\nW\n", 4, "Unknown record type"),
        ("V 0,0,0\nV 1,0,0\nV 2,0,0\nE A-- 0,0,0 2,0,0 100\n", 4, "single alignment step"),
        ("V 0,0,0\nV 1,1,0\nE A-- 0,0,0 1,1,0 1\n", 3, "single alignment step"),
        ("V 0,0,0\nV 1,0,0\nE -A- 0,0,0 1,0,0 1\n", 3, "single alignment step"),
        ("V 0,0,0\nV 1,0,0\nE --- 0,0,0 1,0,0 0\n", 3, "single alignment step"),
        ("V 0,0,0\nV 1,0,0\nE A-- 0,0,0 1,0,0 nan\n", 3, "not finite"),
        ("V 0,0,0\nV 1,0,0\nE A-- 0,0,0 1,0,0 inf\n", 3, "not finite"),
        ("V 0,0,0\nV 1,0,0\nE A-- 0,0,0 1,0,0 -inf\n", 3, "not finite"),
    ]

    @pytest.mark.parametrize("text,line_number,message", BAD_TEXT)
    def test_malformed_line(self, text, line_number, message):
        with pytest.raises(MalformedInputError, match=message) as exc_info:
            parse_graph_text(text)
        assert exc_info.value.line_number == line_number
        assert str(exc_info.value).startswith(f"Line {line_number}:")

    def test_edge_against_declared_order(self):
        text = "V 1,1,1\nV 0,0,0\nE AAA 0,0,0 1,1,1 12\n"
        with pytest.raises(MalformedInputError, match="does not follow"):
            parse_graph_text(text)

    def test_far_apart_coordinates_hit_ceiling(self):
        text = "V 0,0,0 START\nV 2000000,2000000,2000000 END\n"
        with pytest.raises(ResourceExhaustedError) as exc_info:
            parse_graph_text(text)
        assert exc_info.value.resource == "coordinate box"
        assert exc_info.value.requested == 2000001 ** 3

    def test_vertex_and_edge_ceilings(self):
        g = build_alignment_graph(("AC", "A", "C"))
        text = graph_to_text(g)
        with pytest.raises(ResourceExhaustedError, match="vertex"):
            parse_graph_text(text, max_vertices=g.n_vertices - 1)
        with pytest.raises(ResourceExhaustedError, match="edge"):
            parse_graph_text(text, max_edges=g.n_edges - 1)
        parsed = parse_graph_text(text, max_vertices=g.n_vertices, max_edges=g.n_edges)
        assert parsed.n_edges == g.n_edges

    def test_ceilings_disabled(self):
        text = "V 0,0,0 START\nV 130,130,130 END\n"
        g = parse_graph_text(text, max_vertices=None, max_edges=None)
        assert g.shape == (131, 131, 131)

    def test_custom_gap_char(self):
        text = "V 0,0,0\nV 1,0,1\nE A.C 0,0,0 1,0,1 2\n"
        assert parse_graph_text(text, gap_char=".").n_edges == 1
        with pytest.raises(MalformedInputError, match="single alignment step"):
            parse_graph_text(text)

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("V 0,0,0\nQ\n")
        with pytest.raises(MalformedInputError) as exc_info:
            read_graph_text(path)
        assert exc_info.value.line_number == 2
        assert exc_info.value.line_content == "Q"
