"""
validation.py — independent baselines and regression helpers for trialign

This module provides an independent implementation of three-way
sum-of-pairs alignment (sum_of_pairs_reference) that fills the
(n1+1, n2+1, n3+1) DP array directly from the recurrence, without
building a graph, plus small helpers for randomized regression tests.

The goals are:

  1. Verify that solving the built edit graph gives the same score as
     the direct recurrence, under every combination of start/end
     constraints.

  2. Verify that a reported path spells a valid alignment: equal row
     lengths, no all-gap columns, de-gapped rows equal to the aligned
     stretch of each input, and a score equal to the sum of its columns.

The reference uses ScoringModel.sum_of_pairs symbol by symbol rather
than the code tables the builder uses, so a bug in one cannot mask a
bug in the other.
"""

from itertools import product
from typing import Optional, Sequence, Tuple
import timeit

import numpy as np

from . import default
from .dag_core import AlignmentResult, SolveResult, solve_graph
from .fast import solve_graph_fast
from .graph_builder import build_alignment_graph
from .scoring import BLOSUM62, ScoringModel

DEFAULT_RESIDUES = default.RESIDUES


def sum_of_pairs_reference(
    seq1: Sequence[str],
    seq2: Sequence[str],
    seq3: Sequence[str],
    scoring: ScoringModel = BLOSUM62,
    constrain_start: bool = True,
    constrain_end: bool = True,
) -> Optional[float]:
    """
    Best sum-of-pairs path score by direct 3-D dynamic programming.

    Returns None when no admissible path exists.
    """
    n1, n2, n3 = len(seq1), len(seq2), len(seq3)
    gap = scoring.gap_char
    steps = [s for s in product((0, 1), repeat=3) if any(s)]

    D = np.full((n1 + 1, n2 + 1, n3 + 1), -np.inf, dtype=float)

    for i in range(n1 + 1):
        for j in range(n2 + 1):
            for k in range(n3 + 1):
                if not constrain_start or (i, j, k) == (0, 0, 0):
                    best = 0.0
                else:
                    best = -np.inf
                for di, dj, dk in steps:
                    pi, pj, pk = i - di, j - dj, k - dk
                    if pi < 0 or pj < 0 or pk < 0:
                        continue
                    prev = D[pi, pj, pk]
                    if prev == -np.inf:
                        continue
                    a = seq1[pi] if di else gap
                    b = seq2[pj] if dj else gap
                    c = seq3[pk] if dk else gap
                    best = max(best, prev + scoring.sum_of_pairs(a, b, c))
                D[i, j, k] = best

    value = D[n1, n2, n3] if constrain_end else D.max()
    if value == -np.inf:
        return None
    return float(value)


def column_score(column: str, scoring: ScoringModel = BLOSUM62) -> float:
    """Sum-of-pairs score of one 3-symbol alignment column."""
    a, b, c = column
    return scoring.sum_of_pairs(a, b, c)


def check_alignment_validity(
    result: SolveResult,
    sequences: Sequence[Sequence[str]],
    scoring: ScoringModel = BLOSUM62,
) -> Tuple[bool, str]:
    """
    Check that a solved path is a well-formed three-way alignment.

    Returns
    -------
    (valid, message) : (bool, str)
        message describes the first failed check, or "ok".
    """
    if not isinstance(result, AlignmentResult):
        return False, "no path was found"

    gap = scoring.gap_char
    rows = result.aligned_sequences()
    if len({len(row) for row in rows}) != 1:
        return False, f"row lengths differ: {[len(r) for r in rows]}"

    for pos, column in enumerate(result.path):
        if all(symbol == gap for symbol in column):
            return False, f"column {pos} is all gaps"

    for d, (row, seq) in enumerate(zip(rows, sequences)):
        lo, hi = result.start_vertex[d], result.end_vertex[d]
        expected = "".join(seq[p] for p in range(lo, hi))
        if row.replace(gap, "") != expected:
            return False, f"row {d} does not spell positions {lo}..{hi} of its sequence"

    for (u, v, column) in zip(result.vertices, result.vertices[1:], result.path):
        step = tuple(b - a for a, b in zip(u, v))
        expected_step = tuple(0 if symbol == gap else 1 for symbol in column)
        if step != expected_step:
            return False, f"step {u} -> {v} does not match column {column!r}"

    recomputed = sum(column_score(column, scoring) for column in result.path)
    if not np.isclose(recomputed, result.score):
        return False, f"score {result.score} != column sum {recomputed}"

    return True, "ok"


def check_graph_vs_reference(
    seq1: Sequence[str],
    seq2: Sequence[str],
    seq3: Sequence[str],
    scoring: ScoringModel = BLOSUM62,
    constrain_start: bool = True,
    constrain_end: bool = True,
    fast: bool = False,
) -> Tuple[Optional[float], Optional[float]]:
    """
    Compare the graph DP to the direct recurrence.

    Returns
    -------
    graph_score : float or None
        Score from solving the edit graph (None for NoPathFound).
    reference_score : float or None
        Score from sum_of_pairs_reference.
    """
    graph = build_alignment_graph(
        (seq1, seq2, seq3),
        scoring=scoring,
        constrain_start=constrain_start,
        constrain_end=constrain_end,
    )
    result = solve_graph_fast(graph) if fast else solve_graph(graph)
    graph_score = result.score if result.found else None

    reference_score = sum_of_pairs_reference(
        seq1,
        seq2,
        seq3,
        scoring,
        constrain_start=constrain_start,
        constrain_end=constrain_end,
    )
    return graph_score, reference_score


# ---------------------------------------------------------------------------
# Random sequence generation and benchmarking
# ---------------------------------------------------------------------------

def random_protein(length: int, rng: np.random.Generator) -> str:
    """
    Generate a random protein string of a given length.

    Parameters
    ----------
    length : int
        Length of the string to generate.
    rng : np.random.Generator
        NumPy random generator instance.
    """
    return "".join(rng.choice(DEFAULT_RESIDUES, size=length))


def mutate_sequence(
    seq: str,
    rng: np.random.Generator,
    sub_rate: float = 0.1,
    indel_rate: float = 0.05,
) -> str:
    """
    Apply random substitutions and single-residue indels to a protein sequence.
    """
    residues = DEFAULT_RESIDUES
    result = []

    for residue in seq:
        # Deletion
        if rng.random() < indel_rate:
            continue

        # Substitution
        if rng.random() < sub_rate:
            others = [r for r in residues if r != residue]
            residue = rng.choice(others)

        result.append(str(residue))

        # Insertion (after current residue)
        if rng.random() < indel_rate:
            result.append(str(rng.choice(residues)))

    return "".join(result)


def benchmark_python_vs_cython(
    lengths: Tuple[int, int, int],
    rng: np.random.Generator,
    n_samples: int = 3,
    cython_multiplier: int = 10,
) -> Tuple[float, float]:
    """
    Benchmark the Python DP pass against the Cython one on a global graph.

    Graph construction is done once and excluded from the timings.

    Returns
    -------
    (py_avg, cy_avg) : Tuple[float, float]
        Average seconds per solve.
    """
    seqs = [random_protein(n, rng) for n in lengths]
    graph = build_alignment_graph(seqs, constrain_start=True, constrain_end=True)

    # Warm-up calls to avoid one-time overhead in timing
    solve_graph(graph)
    solve_graph_fast(graph)

    timer_py = timeit.Timer(lambda: solve_graph(graph))
    py_avg = timer_py.timeit(number=n_samples) / n_samples

    timer_cy = timeit.Timer(lambda: solve_graph_fast(graph))
    cy_avg = timer_cy.timeit(number=n_samples * cython_multiplier) / (n_samples * cython_multiplier)

    return py_avg, cy_avg
