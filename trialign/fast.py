"""
fast.py — Cython-backed DP wrapper

This module provides a drop-in replacement for the Python forward pass:
    solve_graph_fast(graph, return_data=False)

It:
  * passes the graph's CSR arrays to dag_dp_core (Cython) as contiguous
    int64/float64 buffers,
  * wraps the resulting per-vertex arrays into DAGData,
  * reuses traceback_path to recover the path,
  * returns the same AlignmentResult / NoPathFound as solve_graph.
"""

import numpy as np
from loguru import logger

from .dag_core import AlignmentGraph, DAGData, SolveResult, traceback_path

try:
    from ._cython.trialign_dp import dag_dp_core
    CYTHON_AVAILABLE = True
except ImportError:
    dag_dp_core = None  # Placeholder to avoid NameError
    CYTHON_AVAILABLE = False


def _cython_not_available_error():
    """Raise a helpful error if Cython extension is not available."""
    raise ImportError(
        "The Cython extension 'trialign._cython.trialign_dp' is not available.\n"
        "This usually means the extension failed to compile during installation.\n\n"
        "To fix this:\n"
        "  1) Ensure a C compiler is installed (gcc, MSVC, etc.).\n"
        "  2) Reinstall trialign with pip install -e . --force-reinstall\n\n"
        "Alternatively, use the pure-Python DP via trialign.dag_core import solve_graph"
    )


def _contiguous(array, dtype) -> np.ndarray:
    return np.ascontiguousarray(array, dtype=dtype)


def solve_graph_fast(
    graph: AlignmentGraph,
    return_data: bool = False,
) -> SolveResult:
    """
    Highest-weight path DP using the Cython core.

    Parameters
    ----------
    graph : AlignmentGraph
        Graph to solve, with optional start/end constraints.
    return_data : bool, default False
        If True, attach the DP arrays (DAGData) to the result.

    Returns
    -------
    AlignmentResult or NoPathFound
        Identical to trialign.dag_core.solve_graph on the same graph.
    """
    ## check cython availability
    if not CYTHON_AVAILABLE:
        _cython_not_available_error()

    logger.debug(
        f"Solving graph (cython): {graph.n_vertices} vertices, {graph.n_edges} edges, "
        f"start={graph.start_vertex}, end={graph.end_vertex}"
    )
    weight, back_edge, best = dag_dp_core(
        _contiguous(graph.order, np.int64),
        _contiguous(graph.in_offsets, np.int64),
        _contiguous(graph.in_edges, np.int64),
        _contiguous(graph.edge_start, np.int64),
        _contiguous(graph.edge_weight, np.float64),
        -1 if graph.start is None else graph.start,
        -1 if graph.end is None else graph.end,
    )

    data = DAGData(weight=weight, back_edge=back_edge, best_vertex=int(best))
    return traceback_path(graph, data, return_data=return_data)
