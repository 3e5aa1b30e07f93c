"""
aligners.py — User-facing three-way alignment helpers

Each function builds the edit graph of three sequences, applies the
requested start/end constraints, runs the DP (pure Python or Cython),
and returns an AlignmentResult or NoPathFound.

The functions here do not change scoring: every column is weighted by
the same sum-of-pairs score from the ScoringModel.
"""

from __future__ import annotations

from typing import Optional, Sequence

from . import default
from .dag_core import SolveResult, solve_graph
from .fast import solve_graph_fast
from .graph_builder import check_three_sequences, build_alignment_graph
from .scoring import ScoringModel

ALIGNMENT_MODES = ("global", "local")


# ---------------------------------------------------------------------------
# Core helper: build, constrain, solve
# ---------------------------------------------------------------------------

def align_with_constraints(
    seq1: Sequence[str],
    seq2: Sequence[str],
    seq3: Sequence[str],
    scoring: Optional[ScoringModel] = None,
    constrain_start: bool = False,
    constrain_end: bool = False,
    fast: bool = False,
    return_data: bool = False,
    max_vertices: Optional[int] = default.MAX_VERTICES,
    max_edges: Optional[int] = default.MAX_EDGES,
) -> SolveResult:
    """
    Align three sequences with optional start/end constraints.

    This is the most general entry point; the other helpers fix the
    constraints.

    Parameters
    ----------
    seq1, seq2, seq3 : sequence of str
        Sequences to align (anything with len() and indexing).

    scoring : ScoringModel, optional
        Defaults to BLOSUM62 with gap cost -6.

    constrain_start : bool
        If True, the path must start at (0, 0, 0).

    constrain_end : bool
        If True, the path must end at (n1, n2, n3).

    fast : bool, default False
        Use the Cython DP core instead of the pure-Python pass.

    return_data : bool, default False
        If True, also return the DP arrays (DAGData).

    max_vertices, max_edges : int or None
        Graph size ceilings.

    Returns
    -------
    AlignmentResult or NoPathFound
    """
    graph = build_alignment_graph(
        (seq1, seq2, seq3),
        scoring=scoring,
        constrain_start=constrain_start,
        constrain_end=constrain_end,
        max_vertices=max_vertices,
        max_edges=max_edges,
    )
    solver = solve_graph_fast if fast else solve_graph
    return solver(graph, return_data=return_data)


# ---------------------------------------------------------------------------
# Global: (0,0,0) -> (n1,n2,n3)
# ---------------------------------------------------------------------------

def align_global(
    seq1: Sequence[str],
    seq2: Sequence[str],
    seq3: Sequence[str],
    scoring: Optional[ScoringModel] = None,
    fast: bool = False,
    return_data: bool = False,
    max_vertices: Optional[int] = default.MAX_VERTICES,
    max_edges: Optional[int] = default.MAX_EDGES,
) -> SolveResult:
    """
    Global sum-of-pairs alignment: every residue of every sequence is used.
    """
    return align_with_constraints(
        seq1,
        seq2,
        seq3,
        scoring=scoring,
        constrain_start=True,
        constrain_end=True,
        fast=fast,
        return_data=return_data,
        max_vertices=max_vertices,
        max_edges=max_edges,
    )


# ---------------------------------------------------------------------------
# Local: unconstrained highest-weight path
# ---------------------------------------------------------------------------

def align_local(
    seq1: Sequence[str],
    seq2: Sequence[str],
    seq3: Sequence[str],
    scoring: Optional[ScoringModel] = None,
    fast: bool = False,
    return_data: bool = False,
    max_vertices: Optional[int] = default.MAX_VERTICES,
    max_edges: Optional[int] = default.MAX_EDGES,
) -> SolveResult:
    """
    Local alignment: the best-scoring path may start and end anywhere.

    Every vertex may begin a path with weight 0, so the score is never
    negative; an all-negative graph yields the empty path at (0, 0, 0).
    """
    return align_with_constraints(
        seq1,
        seq2,
        seq3,
        scoring=scoring,
        constrain_start=False,
        constrain_end=False,
        fast=fast,
        return_data=return_data,
        max_vertices=max_vertices,
        max_edges=max_edges,
    )


def align_sequences(
    sequences: Sequence[Sequence[str]],
    mode: str = "global",
    **kwargs,
) -> SolveResult:
    """
    Align a collection that must hold exactly three sequences.

    Parameters
    ----------
    sequences : sequence of sequences
        Exactly three; anything else raises MalformedInputError.
    mode : {"global", "local"}
    **kwargs
        Passed on to align_global / align_local.
    """
    if mode not in ALIGNMENT_MODES:
        raise ValueError(f"Unknown mode: {mode}")
    seqs = check_three_sequences(sequences)
    aligner = align_global if mode == "global" else align_local
    return aligner(*seqs, **kwargs)
