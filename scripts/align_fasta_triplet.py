#!/usr/bin/env python3
"""
align_fasta_triplet.py — three-way alignment of three FASTA files

Reads the first record of each FASTA file, builds the three-way edit
graph, solves it, and prints a plain-text report.  Optionally writes the
graph in V/E interchange form so it can be solved in another process.

Usage:
  python scripts/align_fasta_triplet.py a.fasta b.fasta c.fasta [--mode local]
"""

import argparse
import sys
from pathlib import Path

from loguru import logger

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from trialign import default
from trialign.dag_core import solve_graph
from trialign.errors import TrialignError
from trialign.fast import CYTHON_AVAILABLE, solve_graph_fast
from trialign.graph_builder import build_alignment_graph
from trialign.graph_text import read_graph_text, write_graph_text
from trialign.io import read_fasta_files, result_report


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n")[0].strip())
    parser.add_argument("fasta", nargs=3, type=Path, help="Three FASTA files")
    parser.add_argument(
        "--mode",
        choices=("global", "local"),
        default="global",
        help="global pins the path to (0,0,0) -> (n1,n2,n3); local leaves both ends free",
    )
    parser.add_argument(
        "--graph-file",
        type=Path,
        default=None,
        help="Write the graph in V/E form here and solve the re-read copy",
    )
    parser.add_argument("--max-vertices", type=int, default=default.MAX_VERTICES)
    parser.add_argument("--max-edges", type=int, default=default.MAX_EDGES)
    parser.add_argument("--fast", action="store_true", help="Use the Cython DP core")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())

    if args.fast and not CYTHON_AVAILABLE:
        logger.error("--fast requested but the Cython extension is not built")
        return 2

    try:
        records = read_fasta_files(args.fasta)
        logger.info(f"Loaded {', '.join(f'{r.name} ({len(r)})' for r in records)}")

        global_mode = args.mode == "global"
        graph = build_alignment_graph(
            records,
            constrain_start=global_mode,
            constrain_end=global_mode,
            max_vertices=args.max_vertices,
            max_edges=args.max_edges,
        )
        logger.info(f"Graph built: {graph.n_vertices} vertices, {graph.n_edges} edges")

        if args.graph_file is not None:
            write_graph_text(graph, args.graph_file)
            logger.info(f"Graph file written: {args.graph_file}")
            graph = read_graph_text(
                args.graph_file,
                max_vertices=args.max_vertices,
                max_edges=args.max_edges,
            )

        solver = solve_graph_fast if args.fast else solve_graph
        result = solver(graph)
    except TrialignError as e:
        logger.error(str(e))
        return 1

    source = "_".join(str(p) for p in args.fasta)
    sys.stdout.write(result_report(result, graph, source=source))
    return 0


if __name__ == "__main__":
    sys.exit(main())
