"""
trialign: optimal three-way sequence alignment as a highest-weight DAG path.
"""

# =============================================================================
# SCORING
# =============================================================================

from .scoring import (
    BLOSUM62,
    ScoringModel,
    pairwise_score,
    sum_of_pairs,
)

# =============================================================================
# GRAPH AND DP CORE
# =============================================================================

from .dag_core import (
    UNREACHED,
    AlignmentGraph,
    AlignmentResult,
    DAGData,
    Edge,
    NoPathFound,
    fill_weights,
    solve_graph,
    traceback_path,
)

from .fast import solve_graph_fast, CYTHON_AVAILABLE

from .graph_builder import (
    MOVES,
    build_alignment_graph,
    check_graph_size,
    count_edges,
    count_vertices,
)

# =============================================================================
# ALIGNERS
# =============================================================================

from .aligners import (
    align_global,
    align_local,
    align_sequences,
    align_with_constraints,
)

# =============================================================================
# INTERCHANGE AND I/O
# =============================================================================

from .graph_text import (
    graph_to_text,
    parse_graph_text,
    read_graph_text,
    write_graph_text,
)

from .io import (
    FastaRecord,
    read_fasta,
    read_fasta_files,
    result_report,
)

# =============================================================================
# ERRORS
# =============================================================================

from .errors import (
    MalformedInputError,
    ResourceExhaustedError,
    TrialignError,
)

# =============================================================================
# VALIDATION AND TESTING
# =============================================================================

from .validation import (
    check_alignment_validity,
    check_graph_vs_reference,
    sum_of_pairs_reference,
)


__all__ = [
    # Scoring
    "BLOSUM62",
    "ScoringModel",
    "pairwise_score",
    "sum_of_pairs",
    # Graph and DP core
    "UNREACHED",
    "AlignmentGraph",
    "AlignmentResult",
    "DAGData",
    "Edge",
    "NoPathFound",
    "fill_weights",
    "solve_graph",
    "traceback_path",
    "CYTHON_AVAILABLE",
    "solve_graph_fast",
    "MOVES",
    "build_alignment_graph",
    "check_graph_size",
    "count_edges",
    "count_vertices",
    # Aligners
    "align_global",
    "align_local",
    "align_sequences",
    "align_with_constraints",
    # Interchange and I/O
    "graph_to_text",
    "parse_graph_text",
    "read_graph_text",
    "write_graph_text",
    "FastaRecord",
    "read_fasta",
    "read_fasta_files",
    "result_report",
    # Errors
    "MalformedInputError",
    "ResourceExhaustedError",
    "TrialignError",
    # Validation
    "check_alignment_validity",
    "check_graph_vs_reference",
    "sum_of_pairs_reference",
]
