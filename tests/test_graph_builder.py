"""
test_graph_builder.py — Tests for three-way edit graph construction

Checks vertex/edge counts against the closed forms, the out-degree of
each vertex class, edge labels and weights, vertex numbering, iteration
orders and the resource ceilings.
"""

import itertools

import numpy as np
import pytest

from trialign.dag_core import solve_graph
from trialign.errors import MalformedInputError, ResourceExhaustedError
from trialign.graph_builder import (
    MOVES,
    build_alignment_graph,
    check_graph_size,
    count_edges,
    count_vertices,
)
from trialign.scoring import sum_of_pairs


def _brute_force_edge_count(lengths):
    total = 0
    for vertex in itertools.product(*(range(n + 1) for n in lengths)):
        for move in MOVES:
            if all(v + m <= n for v, m, n in zip(vertex, move, lengths)):
                total += 1
    return total


class TestCounts:
    """Closed-form sizes."""

    @pytest.mark.parametrize("lengths", [
        (0, 0, 0),
        (1, 1, 1),
        (2, 3, 4),
        (5, 0, 2),
        (3, 3, 0),
    ])
    def test_edge_count_matches_enumeration(self, lengths):
        assert count_edges(lengths) == _brute_force_edge_count(lengths)

    def test_known_sizes(self):
        assert count_vertices((2, 3, 4)) == 60
        assert count_edges((2, 3, 4)) == 255
        assert count_edges((1, 1, 1)) == 19
        assert count_edges((0, 0, 0)) == 0

    def test_built_graph_sizes(self, rng, random_protein_factory):
        seqs = [random_protein_factory(n, rng) for n in (3, 5, 2)]
        g = build_alignment_graph(seqs)
        assert g.n_vertices == count_vertices((3, 5, 2))
        assert g.n_edges == count_edges((3, 5, 2))

    def test_empty_sequences(self):
        g = build_alignment_graph(("", "", ""))
        assert g.n_vertices == 1
        assert g.n_edges == 0


class TestTopology:
    """Edges advance by a single move and respect vertex classes."""

    SEQS = ("HEAG", "PAW", "HE")

    def test_every_edge_is_a_move(self):
        g = build_alignment_graph(self.SEQS)
        steps = g.coords[g.edge_end] - g.coords[g.edge_start]
        assert set(map(tuple, steps.tolist())) == set(MOVES)
        sums = steps.sum(axis=1)
        assert sums.min() >= 1 and sums.max() <= 3

    def test_out_degree_by_exhausted_count(self):
        g = build_alignment_graph(self.SEQS)
        lengths = np.array([len(s) for s in self.SEQS])
        out_degree = np.bincount(g.edge_start, minlength=g.n_vertices)
        exhausted = (g.coords == lengths).sum(axis=1)
        expected = {0: 7, 1: 3, 2: 1, 3: 0}
        for n_exhausted, degree in expected.items():
            assert np.all(out_degree[exhausted == n_exhausted] == degree)

    def test_vertex_ids_are_linearized(self):
        g = build_alignment_graph(self.SEQS)
        n1, n2, n3 = (len(s) for s in self.SEQS)
        for i, j, k in [(0, 0, 0), (1, 2, 1), (4, 3, 2), (2, 0, 1)]:
            assert g.vertex_id((i, j, k)) == i * (n2 + 1) * (n3 + 1) + j * (n3 + 1) + k

    def test_edges_grouped_by_start_then_move(self):
        g = build_alignment_graph(self.SEQS)
        assert np.all(np.diff(g.edge_start) >= 0)
        first = [e.label for e in itertools.islice(g.iter_edges(), 7)]
        assert first == ["H--", "-P-", "--H", "HP-", "-PH", "H-H", "HPH"]

    def test_labels_and_weights(self):
        g = build_alignment_graph(self.SEQS)
        for edge in g.iter_edges():
            expected = "".join(
                seq[s] if e > s else "-"
                for seq, s, e in zip(self.SEQS, edge.start, edge.end)
            )
            assert edge.label == expected
            assert edge.weight == sum_of_pairs(*edge.label)

    def test_custom_scoring(self, dna_scoring):
        g = build_alignment_graph(("A", "C", "A"), scoring=dna_scoring)
        weights = g.edge_label_weights()
        assert weights["ACA"] == -4.0 + -4.0 + 5.0
        assert weights["A-A"] == -3.0 + -3.0 + 5.0
        assert weights["-C-"] == -6.0


class TestConstraintsAndOrder:
    """Designated endpoints and iteration orders."""

    def test_constraint_flags(self):
        g = build_alignment_graph(("AC", "A", "CA"), constrain_start=True, constrain_end=True)
        assert g.start_vertex == (0, 0, 0)
        assert g.end_vertex == (2, 1, 2)

        free = build_alignment_graph(("AC", "A", "CA"))
        assert free.start is None and free.end is None

        end_only = build_alignment_graph(("AC", "A", "CA"), constrain_end=True)
        assert end_only.start is None
        assert end_only.end_vertex == (2, 1, 2)

    def test_wavefront_order(self):
        g = build_alignment_graph(("ACD", "AC", "AD"), order="wavefront")
        sums = g.coords[g.order].sum(axis=1)
        assert np.all(np.diff(sums) >= 0)
        assert g.vertex(int(g.order[0])) == (0, 0, 0)

    @pytest.mark.parametrize("start,end", [
        (False, False),
        (True, False),
        (False, True),
        (True, True),
    ])
    def test_wavefront_same_score(self, rng, random_protein_factory, start, end):
        seqs = [random_protein_factory(n, rng) for n in (4, 3, 5)]
        lex = build_alignment_graph(seqs, constrain_start=start, constrain_end=end)
        wave = build_alignment_graph(
            seqs, constrain_start=start, constrain_end=end, order="wavefront"
        )
        assert solve_graph(lex).score == solve_graph(wave).score

    def test_unknown_order(self):
        with pytest.raises(ValueError, match="Unknown vertex order"):
            build_alignment_graph(("A", "A", "A"), order="diagonal")


class TestInputErrors:
    """Bad inputs fail before any graph is allocated."""

    @pytest.mark.parametrize("seqs", [
        ("A", "A"),
        ("A", "A", "A", "A"),
        (),
    ])
    def test_not_three_sequences(self, seqs):
        with pytest.raises(MalformedInputError, match="exactly three"):
            build_alignment_graph(seqs)

    def test_symbol_outside_alphabet(self):
        with pytest.raises(MalformedInputError, match="not in the scoring alphabet"):
            build_alignment_graph(("ACB", "A", "A"))

    def test_vertex_ceiling(self):
        with pytest.raises(ResourceExhaustedError) as exc_info:
            build_alignment_graph(("AA", "AA", "AA"), max_vertices=10)
        err = exc_info.value
        assert err.resource == "vertex"
        assert err.requested == 27
        assert err.limit == 10

    def test_edge_ceiling(self):
        with pytest.raises(ResourceExhaustedError) as exc_info:
            build_alignment_graph(("A", "A", "A"), max_edges=18)
        assert exc_info.value.resource == "edge"
        assert exc_info.value.requested == 19

    def test_ceiling_disabled(self):
        assert check_graph_size((50, 50, 50), max_vertices=None, max_edges=None) == (
            count_vertices((50, 50, 50)),
            count_edges((50, 50, 50)),
        )

    def test_default_ceiling_rejects_long_inputs(self):
        with pytest.raises(ResourceExhaustedError):
            check_graph_size((200, 200, 200))
