"""
io.py — FASTA input and plain-text result reports

Thin wrappers around the alignment core: reading the three input
sequences from FASTA files, and formatting a solved graph as a
human-readable report.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from loguru import logger

from .dag_core import AlignmentGraph, SolveResult
from .errors import MalformedInputError

PathLike = Union[str, Path]


@dataclass(frozen=True)
class FastaRecord:
    """A single FASTA record; sequence is taken verbatim (no case folding)."""
    name: str
    description: str
    sequence: str

    def __len__(self) -> int:
        return len(self.sequence)

    def __getitem__(self, index):
        return self.sequence[index]


def read_fasta(path: PathLike) -> FastaRecord:
    """
    Read the first record of a FASTA file.

    The header is the first non-blank line and must start with '>'; every
    following line up to the next header is sequence, with surrounding
    whitespace removed.

    Raises
    ------
    MalformedInputError
        If the file has no header line or the record has no residues.
    """
    path = Path(path)
    logger.debug(f"Reading FASTA file: {path}")

    header: Optional[str] = None
    chunks: List[str] = []
    with open(path, "r") as handle:
        for line_number, raw in enumerate(handle, start=1):
            line = raw.strip()
            if not line:
                continue
            if header is None:
                if not line.startswith(">"):
                    raise MalformedInputError(
                        f"{path}: expected a '>' header line", line_number, line
                    )
                header = line[1:].strip()
                continue
            if line.startswith(">"):
                break
            chunks.append(line)

    if header is None:
        raise MalformedInputError(f"{path}: no FASTA record found")
    sequence = "".join(chunks)
    if not sequence:
        raise MalformedInputError(f"{path}: record {header!r} has no sequence")

    name, _, description = header.partition(" ")
    logger.debug(f"Read {name!r} ({len(sequence)} residues)")
    return FastaRecord(name=name, description=description.strip(), sequence=sequence)


def read_fasta_files(paths: Sequence[PathLike]) -> List[FastaRecord]:
    """Read the first record of each file, in order."""
    return [read_fasta(p) for p in paths]


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

def _format_label_map(values: dict) -> str:
    return ", ".join(f"{label}={value:g}" for label, value in values.items())


def result_report(
    result: SolveResult,
    graph: Optional[AlignmentGraph] = None,
    source: str = "",
) -> str:
    """
    Format a solve result as a plain-text report.

    Parameters
    ----------
    result : AlignmentResult or NoPathFound
    graph : AlignmentGraph, optional
        If given, per-label edge weights and label frequencies are included.
    source : str
        Free-text name of the inputs, echoed in the header.
    """
    lines = [f"results: {source}" if source else "results:"]
    if graph is not None:
        lines.append(f"  edge_weights: {_format_label_map(graph.edge_label_weights())}")
        lines.append(f"  edge_histogram: {_format_label_map(graph.edge_label_histogram())}")

    if not result.found:
        lines.append("  path: No Path Found!")
        lines.append(f"  reason: {result.reason}")
        return "\n".join(lines) + "\n"

    rows = result.aligned_sequences()
    lines.extend([
        f"  score: {result.score:.6f}",
        f"  beginning_vertex: {','.join(map(str, result.start_vertex))}",
        f"  ending_vertex: {','.join(map(str, result.end_vertex))}",
        "  path:",
    ])
    lines.extend(f"    {label}" for label in result.path)
    lines.append("  alignment:")
    lines.extend(f"    {row}" for row in rows)
    return "\n".join(lines) + "\n"
