"""
graph_text.py — line-oriented interchange form of alignment graphs

A graph is written as all of its vertices, in iteration order, followed by
all of its edges, in creation order:

    V i,j,k [START] [END]
    E <label> i,j,k i,j,k <weight>

START / END mark the designated start and end vertices (at most one of
each).  Edge endpoints must be declared by earlier V lines, and the V
line order is the topological order the DP will use.

This form is only needed when graph construction and solving happen in
different processes; in-process callers hand the AlignmentGraph over
directly.
"""
from __future__ import annotations

import math
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from loguru import logger

from . import default
from .dag_core import AlignmentGraph, Coord
from .errors import MalformedInputError, ResourceExhaustedError

PathLike = Union[str, Path]


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

def format_vertex(coord: Coord) -> str:
    return ",".join(str(c) for c in coord)


def format_weight(weight: float) -> str:
    """Integral weights without a decimal point, others at full precision."""
    weight = float(weight)
    if weight.is_integer():
        return str(int(weight))
    return repr(weight)


def iter_graph_lines(graph: AlignmentGraph) -> Iterator[str]:
    """Yield the V and E lines of graph, without trailing newlines."""
    for vid in graph.order.tolist():
        line = f"V {format_vertex(graph.vertex(vid))}"
        if vid == graph.start:
            line += " START"
        if vid == graph.end:
            line += " END"
        yield line

    for edge in graph.iter_edges():
        yield (
            f"E {edge.label} {format_vertex(edge.start)} "
            f"{format_vertex(edge.end)} {format_weight(edge.weight)}"
        )


def graph_to_text(graph: AlignmentGraph) -> str:
    return "".join(f"{line}\n" for line in iter_graph_lines(graph))


def write_graph_text(graph: AlignmentGraph, path: PathLike) -> Path:
    """Write graph to path in interchange form and return the path."""
    path = Path(path)
    logger.debug(f"Writing graph file: {path}")
    with open(path, "w") as handle:
        for line in iter_graph_lines(graph):
            handle.write(line)
            handle.write("\n")
    logger.debug(f"Wrote {graph.n_vertices} vertices and {graph.n_edges} edges")
    return path


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _parse_coord(token: str, line_number: int, line: str) -> Coord:
    parts = token.split(",")
    if len(parts) != 3:
        raise MalformedInputError(
            f"Vertex {token!r} is not an i,j,k triple", line_number, line
        )
    try:
        i, j, k = (int(p) for p in parts)
    except ValueError:
        raise MalformedInputError(
            f"Vertex {token!r} has non-integer coordinates", line_number, line
        ) from None
    if min(i, j, k) < 0:
        raise MalformedInputError(
            f"Vertex {token!r} has negative coordinates", line_number, line
        )
    return (i, j, k)


def parse_graph_text(
    lines: Union[str, Iterable[str]],
    gap_char: str = default.GAP_CHAR,
    max_vertices: Optional[int] = default.MAX_VERTICES,
    max_edges: Optional[int] = default.MAX_EDGES,
) -> AlignmentGraph:
    """
    Parse interchange text into an AlignmentGraph.

    Parameters
    ----------
    lines : str or iterable of str
        Whole text, or its lines (e.g. an open file).  Blank lines are ignored.
    gap_char : str
        Gap symbol of edge labels.  Each edge must advance by 1 exactly in
        the positions where its label is not a gap.
    max_vertices, max_edges : int or None
        Ceilings on vertex count (and coordinate bounding box) and edge
        count.  None disables a ceiling.

    Raises
    ------
    MalformedInputError
        On any line that breaks the format; the error carries the line number.
    ResourceExhaustedError
        If the graph would exceed a ceiling.
    """
    if isinstance(lines, str):
        lines = lines.splitlines()

    coords: List[Coord] = []
    ids: Dict[Coord, int] = {}
    start: Optional[Coord] = None
    end: Optional[Coord] = None

    edge_start: List[int] = []
    edge_end: List[int] = []
    edge_weight: List[float] = []
    edge_label: List[str] = []

    for line_number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        tokens = line.split()
        if not tokens:
            continue
        kind = tokens[0]

        if kind == "V":
            if edge_start:
                raise MalformedInputError(
                    "Vertex declared after the first edge", line_number, line
                )
            if len(tokens) < 2:
                raise MalformedInputError("Vertex line without coordinates", line_number, line)
            coord = _parse_coord(tokens[1], line_number, line)
            if coord in ids:
                raise MalformedInputError(
                    f"Vertex {tokens[1]} declared twice", line_number, line
                )
            for flag in tokens[2:]:
                if flag == "START":
                    if start is not None:
                        raise MalformedInputError(
                            "More than one START vertex", line_number, line
                        )
                    start = coord
                elif flag == "END":
                    if end is not None:
                        raise MalformedInputError(
                            "More than one END vertex", line_number, line
                        )
                    end = coord
                else:
                    raise MalformedInputError(
                        f"Unknown vertex flag {flag!r}", line_number, line
                    )
            if max_vertices is not None and len(coords) >= max_vertices:
                raise ResourceExhaustedError("vertex", len(coords) + 1, max_vertices)
            ids[coord] = len(coords)
            coords.append(coord)

        elif kind == "E":
            if len(tokens) != 5:
                raise MalformedInputError(
                    f"Edge line needs 5 fields, got {len(tokens)}", line_number, line
                )
            _, label, start_token, end_token, weight_token = tokens
            if len(label) != 3:
                raise MalformedInputError(
                    f"Edge label {label!r} is not a 3-symbol column", line_number, line
                )
            endpoints: List[int] = []
            ends: List[Coord] = []
            for token in (start_token, end_token):
                coord = _parse_coord(token, line_number, line)
                if coord not in ids:
                    raise MalformedInputError(
                        f"Edge refers to undeclared vertex {token}", line_number, line
                    )
                endpoints.append(ids[coord])
                ends.append(coord)
            step = tuple(b - a for a, b in zip(*ends))
            moved = tuple(int(symbol != gap_char) for symbol in label)
            if step != moved or not any(moved):
                raise MalformedInputError(
                    f"Edge {label} from {start_token} to {end_token} is not a single "
                    f"alignment step",
                    line_number,
                    line,
                )
            try:
                weight = float(weight_token)
            except ValueError:
                raise MalformedInputError(
                    f"Edge weight {weight_token!r} is not a number", line_number, line
                ) from None
            if not math.isfinite(weight):
                raise MalformedInputError(
                    f"Edge weight {weight_token!r} is not finite", line_number, line
                )
            if max_edges is not None and len(edge_start) >= max_edges:
                raise ResourceExhaustedError("edge", len(edge_start) + 1, max_edges)

            edge_start.append(endpoints[0])
            edge_end.append(endpoints[1])
            edge_weight.append(weight)
            edge_label.append(label)

        else:
            raise MalformedInputError(
                f"Unknown record type {kind!r}", line_number, line
            )

    logger.debug(f"Parsed {len(coords)} vertices and {len(edge_start)} edges")
    return AlignmentGraph.from_arrays(
        coords=coords,
        edge_start=edge_start,
        edge_end=edge_end,
        edge_weight=edge_weight,
        edge_label=edge_label,
        start=start,
        end=end,
        max_vertices=max_vertices,
        max_edges=max_edges,
    )


def read_graph_text(path: PathLike, **kwargs) -> AlignmentGraph:
    """Parse a graph file written by write_graph_text; kwargs go to parse_graph_text."""
    path = Path(path)
    logger.debug(f"Reading graph file: {path}")
    with open(path, "r") as handle:
        return parse_graph_text(handle, **kwargs)
