"""
dag_core.py — weighted DAG and highest-weight path dynamic program

This module holds the product graph of a three-way alignment and the
single-pass DP that finds its highest-weight path.

The graph is stored as an arena: vertices and edges are addressed by
dense integer ids, per-edge fields live in parallel arrays, and the
edges entering each vertex are indexed in CSR form (in_offsets,
in_edges).  Per-vertex DP state (best weight, best incoming edge) is
kept outside the graph in a DAGData object, so a graph can be solved
any number of times under different start/end constraints.

The DP visits vertices once, in graph.order, which must be a
topological order:

    W(v) = max( 0                          if v may start a path,
                max_{e=(u,v), u reached} W(u) + w(e) )

With a start constraint only the designated start may take the trivial
empty path, and vertices preceding it in the order are never reached.
With an end constraint the designated end is the only admissible
terminal vertex; otherwise the best reached vertex wins, ties going to
the one visited first.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import ClassVar, Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray
from loguru import logger

from . import default
from .errors import MalformedInputError, ResourceExhaustedError

Coord = Tuple[int, int, int]

# Weight of a vertex that no admissible path reaches
UNREACHED = float("-inf")


# ---------------------------------------------------------------------------
# Graph containers
# ---------------------------------------------------------------------------

class Edge(NamedTuple):
    """One alignment column as an edge of the product graph."""
    label: str
    start: Coord
    end: Coord
    weight: float


@dataclass(eq=False)
class AlignmentGraph:
    """
    Immutable topology of a weighted DAG over coordinate-triple vertices.

    Vertex arrays
    -------------
    coords : (V, 3) int64
        Coordinate triple (i, j, k) of each vertex id.

    order : (V,) int64
        Vertex ids in a topological order; the DP visits them in this order.

    lookup : (prod(shape),) int64
        Vertex id for each linearized coordinate, -1 where no vertex exists.
        For builder graphs this is the identity.

    shape : (3,) tuple of int
        Bounding box of the coordinates, i.e. (n1+1, n2+1, n3+1).

    Edge arrays
    -----------
    edge_start, edge_end : (E,) int64
        Vertex ids of the endpoints.

    edge_weight : (E,) float
        Sum-of-pairs weight of the column.

    edge_label : (E,) str
        The 3-symbol column the edge represents.

    in_offsets : (V+1,) int64, in_edges : (E,) int64
        Incoming edges of vertex v are in_edges[in_offsets[v]:in_offsets[v+1]],
        in creation order.

    Constraints
    -----------
    start, end : int or None
        Optional designated start / end vertex ids.
    """

    coords: NDArray[np.integer]
    order: NDArray[np.integer]
    lookup: NDArray[np.integer]
    shape: Tuple[int, int, int]

    edge_start: NDArray[np.integer]
    edge_end: NDArray[np.integer]
    edge_weight: NDArray[np.floating]
    edge_label: NDArray[np.str_]

    in_offsets: NDArray[np.integer]
    in_edges: NDArray[np.integer]

    start: Optional[int] = None
    end: Optional[int] = None

    @classmethod
    def from_arrays(
        cls,
        coords: Sequence[Coord] | NDArray[np.integer],
        edge_start: Sequence[int] | NDArray[np.integer],
        edge_end: Sequence[int] | NDArray[np.integer],
        edge_weight: Sequence[float] | NDArray[np.floating],
        edge_label: Sequence[str] | NDArray[np.str_],
        order: Optional[Sequence[int] | NDArray[np.integer]] = None,
        start: Optional[Coord] = None,
        end: Optional[Coord] = None,
        gap_char: Optional[str] = None,
        max_vertices: Optional[int] = default.MAX_VERTICES,
        max_edges: Optional[int] = default.MAX_EDGES,
    ) -> "AlignmentGraph":
        """
        Assemble a graph from vertex coordinates and parallel edge arrays.

        Edge endpoints are vertex ids (row indices into coords).  If order
        is omitted, vertex ids are taken to be in topological order already.

        Every edge must advance each coordinate by 0 or 1, and at least one
        by 1.  If gap_char is given, labels must also be 3 symbols long with
        a non-gap symbol exactly where the edge advances.

        max_vertices bounds both the vertex count and the coordinate
        bounding box the lookup is allocated over; max_edges bounds the
        edge count.  None disables a ceiling.

        Raises
        ------
        MalformedInputError
            If coordinates are negative or repeated, an edge refers to an
            undeclared vertex, does not point forward in order, is not a
            single alignment step, or has a non-finite weight.
        ResourceExhaustedError
            If a ceiling is exceeded; checked before the lookup is allocated.
        """
        coords = np.asarray(coords, dtype=np.int64).reshape(-1, 3)
        n_vertices = coords.shape[0]

        edge_start = np.asarray(edge_start, dtype=np.int64)
        edge_end = np.asarray(edge_end, dtype=np.int64)
        edge_weight = np.asarray(edge_weight, dtype=float)
        edge_label = np.asarray(edge_label, dtype=str)
        n_edges = edge_start.shape[0]
        if not (edge_end.shape[0] == edge_weight.shape[0] == edge_label.shape[0] == n_edges):
            raise MalformedInputError(
                "Edge arrays must have equal lengths, got "
                f"start={edge_start.shape[0]}, end={edge_end.shape[0]}, "
                f"weight={edge_weight.shape[0]}, label={edge_label.shape[0]}"
            )

        if max_vertices is not None and n_vertices > max_vertices:
            raise ResourceExhaustedError("vertex", n_vertices, max_vertices)
        if max_edges is not None and n_edges > max_edges:
            raise ResourceExhaustedError("edge", n_edges, max_edges)

        if not np.all(np.isfinite(edge_weight)):
            e = int(np.argmin(np.isfinite(edge_weight)))
            raise MalformedInputError(
                f"Edge {edge_label[e]!r} has non-finite weight {float(edge_weight[e])}"
            )

        if order is None:
            order = np.arange(n_vertices, dtype=np.int64)
        else:
            order = np.asarray(order, dtype=np.int64)
            if order.shape[0] != n_vertices or not np.array_equal(
                np.sort(order), np.arange(n_vertices)
            ):
                raise MalformedInputError("order must be a permutation of the vertex ids")

        if n_vertices and coords.min() < 0:
            raise MalformedInputError("Vertex coordinates must be non-negative")

        if n_edges:
            lo = min(edge_start.min(), edge_end.min())
            hi = max(edge_start.max(), edge_end.max())
            if lo < 0 or hi >= n_vertices:
                raise MalformedInputError(
                    f"Edge refers to undeclared vertex id (valid ids are 0..{n_vertices - 1})"
                )

        # Dense coordinate -> id lookup over the bounding box
        if n_vertices:
            shape = tuple(int(x) + 1 for x in coords.max(axis=0))
        else:
            shape = (0, 0, 0)
        box = shape[0] * shape[1] * shape[2]
        if max_vertices is not None and box > max_vertices:
            raise ResourceExhaustedError("coordinate box", box, max_vertices)
        lookup = np.full(box, -1, dtype=np.int64)
        if n_vertices:
            linear = np.ravel_multi_index(tuple(coords.T), shape)
            lookup[linear] = np.arange(n_vertices, dtype=np.int64)
            if np.count_nonzero(lookup >= 0) != n_vertices:
                raise MalformedInputError("Vertex coordinates must be unique")

        # Every edge must point forward in the iteration order
        if n_edges:
            position = np.empty(n_vertices, dtype=np.int64)
            position[order] = np.arange(n_vertices, dtype=np.int64)
            backward = position[edge_start] >= position[edge_end]
            if backward.any():
                e = int(np.argmax(backward))
                raise MalformedInputError(
                    f"Edge {edge_label[e]!r} from {tuple(coords[edge_start[e]].tolist())} "
                    f"to {tuple(coords[edge_end[e]].tolist())} does not follow the vertex order"
                )

            steps = coords[edge_end] - coords[edge_start]
            bad = ((steps != 0) & (steps != 1)).any(axis=1) | ~steps.any(axis=1)
            if gap_char is not None:
                lengths = np.char.str_len(edge_label)
                if np.any(lengths != 3):
                    e = int(np.argmax(lengths != 3))
                    raise MalformedInputError(
                        f"Edge label {edge_label[e]!r} is not a 3-symbol column"
                    )
                symbols = edge_label.astype("<U3").view("<U1").reshape(-1, 3)
                bad |= ((symbols != gap_char) != (steps == 1)).any(axis=1)
            if bad.any():
                e = int(np.argmax(bad))
                raise MalformedInputError(
                    f"Edge {edge_label[e]!r} from {tuple(coords[edge_start[e]].tolist())} "
                    f"to {tuple(coords[edge_end[e]].tolist())} is not a single alignment step"
                )

        # CSR index of incoming edges, stable so creation order is kept per vertex
        in_edges = np.argsort(edge_end, kind="stable").astype(np.int64)
        counts = np.bincount(edge_end, minlength=n_vertices)
        in_offsets = np.zeros(n_vertices + 1, dtype=np.int64)
        np.cumsum(counts, out=in_offsets[1:])

        graph = cls(
            coords=coords,
            order=order,
            lookup=lookup,
            shape=shape,
            edge_start=edge_start,
            edge_end=edge_end,
            edge_weight=edge_weight,
            edge_label=edge_label,
            in_offsets=in_offsets,
            in_edges=in_edges,
        )
        return graph.with_constraints(start=start, end=end)

    # ------------------------------------------------------------------
    # Sizes and lookups
    # ------------------------------------------------------------------

    @property
    def n_vertices(self) -> int:
        return int(self.coords.shape[0])

    @property
    def n_edges(self) -> int:
        return int(self.edge_start.shape[0])

    @property
    def start_vertex(self) -> Optional[Coord]:
        return None if self.start is None else self.vertex(self.start)

    @property
    def end_vertex(self) -> Optional[Coord]:
        return None if self.end is None else self.vertex(self.end)

    def vertex(self, vertex_id: int) -> Coord:
        """Coordinate triple of a vertex id."""
        i, j, k = self.coords[vertex_id].tolist()
        return (i, j, k)

    def vertex_id(self, coord: Coord) -> int:
        """
        Vertex id of a coordinate triple.

        Raises
        ------
        MalformedInputError
            If no vertex has these coordinates.
        """
        if len(coord) != 3 or any(c < 0 or c >= s for c, s in zip(coord, self.shape)):
            raise MalformedInputError(f"No vertex at {tuple(coord)}")
        vid = int(self.lookup[np.ravel_multi_index(tuple(coord), self.shape)])
        if vid < 0:
            raise MalformedInputError(f"No vertex at {tuple(coord)}")
        return vid

    def with_constraints(
        self,
        start: Optional[Coord] = None,
        end: Optional[Coord] = None,
    ) -> "AlignmentGraph":
        """
        Return a view of this graph with the given start/end constraints.

        The topology arrays are shared; None leaves that end unconstrained.
        """
        start_id = None if start is None else self.vertex_id(start)
        end_id = None if end is None else self.vertex_id(end)
        return replace(self, start=start_id, end=end_id)

    # ------------------------------------------------------------------
    # Iteration
    # ------------------------------------------------------------------

    def iter_vertices(self) -> Iterator[Coord]:
        """Vertex coordinates in iteration order."""
        for vid in self.order.tolist():
            yield self.vertex(vid)

    def edge(self, edge_id: int) -> Edge:
        return Edge(
            label=str(self.edge_label[edge_id]),
            start=self.vertex(int(self.edge_start[edge_id])),
            end=self.vertex(int(self.edge_end[edge_id])),
            weight=float(self.edge_weight[edge_id]),
        )

    def iter_edges(self) -> Iterator[Edge]:
        """Edges in creation order."""
        for e in range(self.n_edges):
            yield self.edge(e)

    def incoming_edges(self, coord: Coord) -> List[Edge]:
        vid = self.vertex_id(coord)
        lo, hi = self.in_offsets[vid], self.in_offsets[vid + 1]
        return [self.edge(int(e)) for e in self.in_edges[lo:hi]]

    # ------------------------------------------------------------------
    # Per-label diagnostics (not used by the DP)
    # ------------------------------------------------------------------

    def edge_label_weights(self) -> Dict[str, float]:
        """Weight of the first edge carrying each label, keyed by sorted label."""
        if not self.n_edges:
            return {}
        labels, first = np.unique(self.edge_label, return_index=True)
        return dict(zip(labels.tolist(), self.edge_weight[first].tolist()))

    def edge_label_histogram(self) -> Dict[str, int]:
        """Number of edges carrying each label, keyed by sorted label."""
        if not self.n_edges:
            return {}
        labels, counts = np.unique(self.edge_label, return_counts=True)
        return dict(zip(labels.tolist(), counts.tolist()))


# ---------------------------------------------------------------------------
# DP state and results
# ---------------------------------------------------------------------------

@dataclass
class DAGData:
    """
    Per-vertex DP arrays for one solve.

    weight : (V,) float
        Best path weight ending at each vertex, UNREACHED (-inf) if none.

    back_edge : (V,) int64
        Edge id used to reach each vertex on its best path, -1 for the
        first vertex of a path or an unreached vertex.

    best_vertex : int
        Vertex id ending the winning path, -1 if no path was found.
    """
    weight: NDArray[np.floating]
    back_edge: NDArray[np.integer]
    best_vertex: int


@dataclass
class AlignmentResult:
    """
    Highest-weight path through an alignment graph.

    Attributes
    ----------
    score : float
        Total weight of the path.

    start_vertex, end_vertex : (i, j, k)
        First and last vertex of the path.

    path : list of str
        Edge labels (alignment columns) from start to end.

    vertices : list of (i, j, k)
        Vertices visited, len(path) + 1 entries.

    edge_weights : list of float
        Weight of each edge on the path.

    data : DAGData or None
        Full DP arrays, if requested.
    """
    score: float
    start_vertex: Coord
    end_vertex: Coord
    path: List[str]
    vertices: List[Coord]
    edge_weights: List[float]
    data: Optional[DAGData] = None

    found: ClassVar[bool] = True

    def aligned_sequences(self) -> Tuple[str, str, str]:
        """Return the three gapped alignment rows spelled by the path."""
        return tuple("".join(label[d] for label in self.path) for d in range(3))


@dataclass
class NoPathFound:
    """Outcome of a solve in which no admissible path exists."""
    reason: str = "No Path Found!"
    data: Optional[DAGData] = None

    found: ClassVar[bool] = False


SolveResult = Union[AlignmentResult, NoPathFound]


# ---------------------------------------------------------------------------
# Forward pass
# ---------------------------------------------------------------------------

def fill_weights(graph: AlignmentGraph) -> DAGData:
    """
    Run the single forward DP pass over graph.order.

    Each vertex is finalized when visited: its incoming edges all start at
    vertices earlier in the order.
    """
    n = graph.n_vertices
    weight = [UNREACHED] * n
    back_edge = [-1] * n

    in_offsets = graph.in_offsets.tolist()
    in_edges = graph.in_edges.tolist()
    edge_start = graph.edge_start.tolist()
    edge_weight = graph.edge_weight.tolist()

    start, end = graph.start, graph.end
    start_found = False
    best = -1

    for v in graph.order.tolist():
        if start is not None and not start_found:
            if v != start:
                continue
            start_found = True

        # trivial empty path
        if start is None or v == start:
            weight[v] = 0.0

        for p in range(in_offsets[v], in_offsets[v + 1]):
            e = in_edges[p]
            u = edge_start[e]
            if weight[u] == UNREACHED:
                continue
            candidate = weight[u] + edge_weight[e]
            if candidate > weight[v]:
                weight[v] = candidate
                back_edge[v] = e

        if end is not None:
            if v == end:
                if weight[v] != UNREACHED:
                    best = v
                break
            continue

        if weight[v] != UNREACHED and (best < 0 or weight[v] > weight[best]):
            best = v

    return DAGData(
        weight=np.asarray(weight, dtype=float),
        back_edge=np.asarray(back_edge, dtype=np.int64),
        best_vertex=best,
    )


# ---------------------------------------------------------------------------
# Traceback
# ---------------------------------------------------------------------------

def traceback_path(
    graph: AlignmentGraph,
    data: DAGData,
    return_data: bool = False,
) -> SolveResult:
    """
    Recover the winning path by following back edges from data.best_vertex.

    The walk stops at the first vertex without a back edge, which is the
    realized start of the path (the designated start, if one is set).
    """
    keep = data if return_data else None
    best = data.best_vertex
    if best < 0:
        if graph.n_vertices == 0:
            reason = "Graph has no vertices"
        elif graph.end is not None:
            reason = f"End vertex {graph.end_vertex} is not reachable"
        else:
            reason = "No vertex is reachable"
        return NoPathFound(reason=reason, data=keep)

    labels: List[str] = []
    weights: List[float] = []
    vertices: List[Coord] = [graph.vertex(best)]

    v = best
    while data.back_edge[v] >= 0:
        e = int(data.back_edge[v])
        labels.append(str(graph.edge_label[e]))
        weights.append(float(graph.edge_weight[e]))
        v = int(graph.edge_start[e])
        vertices.append(graph.vertex(v))

    labels.reverse()
    weights.reverse()
    vertices.reverse()

    return AlignmentResult(
        score=float(data.weight[best]),
        start_vertex=vertices[0],
        end_vertex=vertices[-1],
        path=labels,
        vertices=vertices,
        edge_weights=weights,
        data=keep,
    )


# ---------------------------------------------------------------------------
# Top-level driver
# ---------------------------------------------------------------------------

def solve_graph(
    graph: AlignmentGraph,
    return_data: bool = False,
) -> SolveResult:
    """
    Find the highest-weight path through graph with the pure-Python DP.

    Parameters
    ----------
    graph : AlignmentGraph
        Graph to solve, with optional start/end constraints.
    return_data : bool, default False
        If True, attach the DP arrays (DAGData) to the result.

    Returns
    -------
    AlignmentResult or NoPathFound
    """
    logger.debug(
        f"Solving graph: {graph.n_vertices} vertices, {graph.n_edges} edges, "
        f"start={graph.start_vertex}, end={graph.end_vertex}"
    )
    data = fill_weights(graph)
    result = traceback_path(graph, data, return_data=return_data)
    if result.found:
        logger.debug(f"Best path ends at {result.end_vertex} with score {result.score}")
    else:
        logger.debug(result.reason)
    return result
