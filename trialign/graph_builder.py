"""
graph_builder.py — three-way edit graph construction

Given sequences S1, S2, S3 of lengths n1, n2, n3, the edit graph has a
vertex (i, j, k) for every 0 ≤ i ≤ n1, 0 ≤ j ≤ n2, 0 ≤ k ≤ n3, and an
edge (i, j, k) -> (i + di, j + dj, k + dk) for every move

    (di, dj, dk) ∈ {0, 1}^3 \\ {(0, 0, 0)}

that stays inside the box.  The edge label is the alignment column made
of S1[i] (or a gap if di = 0), S2[j] (or a gap), S3[k] (or a gap), and
its weight is the sum-of-pairs score of that column.

Interior vertices have 7 outgoing edges, vertices exhausted in one
sequence have 3, in two sequences 1, and the terminal vertex none.

Edges are generated one move at a time over the whole box with numpy,
then put in per-vertex order (by start vertex, then move), which is the
order the DP sees them in when several incoming edges tie.
"""
from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from . import default
from .dag_core import AlignmentGraph
from .errors import MalformedInputError, ResourceExhaustedError
from .scoring import BLOSUM62, ScoringModel

# Non-empty subsets of {S1, S2, S3}: single residues, pairs, then all three
MOVES: Tuple[Tuple[int, int, int], ...] = (
    (1, 0, 0),
    (0, 1, 0),
    (0, 0, 1),
    (1, 1, 0),
    (0, 1, 1),
    (1, 0, 1),
    (1, 1, 1),
)

VERTEX_ORDERS = ("lexicographic", "wavefront")


# ---------------------------------------------------------------------------
# Size accounting
# ---------------------------------------------------------------------------

def count_vertices(lengths: Sequence[int]) -> int:
    """(n1+1)(n2+1)(n3+1)."""
    total = 1
    for n in lengths:
        total *= n + 1
    return total


def count_edges(lengths: Sequence[int]) -> int:
    """
    Exact edge count of the edit graph.

    A move is available at (i, j, k) iff every coordinate it advances is
    below its sequence length, so move m contributes ∏_d (n_d + 1 - m_d)
    edges.
    """
    total = 0
    for move in MOVES:
        count = 1
        for n, step in zip(lengths, move):
            count *= n + 1 - step
        total += count
    return total


def check_graph_size(
    lengths: Sequence[int],
    max_vertices: Optional[int] = default.MAX_VERTICES,
    max_edges: Optional[int] = default.MAX_EDGES,
) -> Tuple[int, int]:
    """
    Fail fast if the edit graph for these lengths is over a ceiling.

    Returns
    -------
    (n_vertices, n_edges) : tuple of int

    Raises
    ------
    ResourceExhaustedError
        If either count exceeds its ceiling.  None disables a ceiling.
    """
    n_vertices = count_vertices(lengths)
    if max_vertices is not None and n_vertices > max_vertices:
        raise ResourceExhaustedError("vertex", n_vertices, max_vertices)
    n_edges = count_edges(lengths)
    if max_edges is not None and n_edges > max_edges:
        raise ResourceExhaustedError("edge", n_edges, max_edges)
    return n_vertices, n_edges


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def check_three_sequences(sequences: Sequence[Sequence[str]]) -> Tuple[Sequence[str], ...]:
    seqs = tuple(sequences)
    if len(seqs) != 3:
        raise MalformedInputError(
            f"Three-way alignment needs exactly three sequences, got {len(seqs)}"
        )
    return seqs


def build_alignment_graph(
    sequences: Sequence[Sequence[str]],
    scoring: Optional[ScoringModel] = None,
    constrain_start: bool = False,
    constrain_end: bool = False,
    order: str = "lexicographic",
    max_vertices: Optional[int] = default.MAX_VERTICES,
    max_edges: Optional[int] = default.MAX_EDGES,
) -> AlignmentGraph:
    """
    Build the weighted three-way edit graph of three sequences.

    Parameters
    ----------
    sequences : sequence of three sequences of symbols
        Each must support len() and integer indexing; symbols are used verbatim.

    scoring : ScoringModel, optional
        Column weights; defaults to BLOSUM62 with gap cost -6.

    constrain_start, constrain_end : bool
        Designate (0, 0, 0) as start and/or (n1, n2, n3) as end.

    order : {"lexicographic", "wavefront"}
        Vertex iteration order: i slowest then j then k, or by
        non-decreasing i+j+k (lexicographic within one wavefront).

    max_vertices, max_edges : int or None
        Ceilings checked before any allocation.

    Returns
    -------
    AlignmentGraph
        Vertex ids equal linearized coordinates i*(n2+1)*(n3+1) + j*(n3+1) + k.

    Raises
    ------
    MalformedInputError
        Not exactly three sequences, or a symbol outside the alphabet.
    ResourceExhaustedError
        The graph would exceed a ceiling.
    """
    seqs = check_three_sequences(sequences)
    if order not in VERTEX_ORDERS:
        raise ValueError(f"Unknown vertex order: {order!r} (expected one of {VERTEX_ORDERS})")
    scoring = BLOSUM62 if scoring is None else scoring

    lengths = tuple(len(s) for s in seqs)
    n_vertices, n_edges = check_graph_size(lengths, max_vertices, max_edges)
    logger.debug(
        f"Building edit graph for lengths {lengths}: "
        f"{n_vertices} vertices, {n_edges} edges"
    )

    codes = [scoring.encode(s) for s in seqs]
    gap = scoring.gap_code
    sp_table = scoring.sum_of_pairs_table()

    shape = tuple(n + 1 for n in lengths)
    strides = (shape[1] * shape[2], shape[2], 1)

    # i slowest, then j, then k: row-major order of the box
    coords = np.indices(shape, dtype=np.int64).reshape(3, -1).T

    starts, ends, columns, move_ids = [], [], [], []
    for move_id, move in enumerate(MOVES):
        ranges = [np.arange(size - step, dtype=np.int64) for size, step in zip(shape, move)]
        grid = [axis.ravel() for axis in np.meshgrid(*ranges, indexing="ij")]
        start = grid[0] * strides[0] + grid[1] * strides[1] + grid[2]
        offset = sum(step * stride for step, stride in zip(move, strides))

        column = np.full((start.shape[0], 3), gap, dtype=np.int32)
        for d in range(3):
            if move[d]:
                column[:, d] = codes[d][grid[d]]

        starts.append(start)
        ends.append(start + offset)
        columns.append(column)
        move_ids.append(np.full(start.shape[0], move_id, dtype=np.int8))

    edge_start = np.concatenate(starts)
    edge_end = np.concatenate(ends)
    edge_columns = np.concatenate(columns)
    edge_moves = np.concatenate(move_ids)

    # per-vertex emission order: by start vertex, then by move
    emit = np.lexsort((edge_moves, edge_start))
    edge_start = edge_start[emit]
    edge_end = edge_end[emit]
    edge_columns = edge_columns[emit]

    edge_weight = sp_table[edge_columns[:, 0], edge_columns[:, 1], edge_columns[:, 2]]
    symbols = scoring.symbols[edge_columns]
    edge_label = np.char.add(np.char.add(symbols[:, 0], symbols[:, 1]), symbols[:, 2])

    if order == "wavefront":
        vertex_order = np.argsort(coords.sum(axis=1), kind="stable")
    else:
        vertex_order = np.arange(n_vertices, dtype=np.int64)

    graph = AlignmentGraph.from_arrays(
        coords=coords,
        edge_start=edge_start,
        edge_end=edge_end,
        edge_weight=edge_weight,
        edge_label=edge_label,
        order=vertex_order,
        max_vertices=max_vertices,
        max_edges=max_edges,
    )
    return graph.with_constraints(
        start=(0, 0, 0) if constrain_start else None,
        end=lengths if constrain_end else None,
    )
