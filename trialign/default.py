"""
default.py — Default parameters for trialign

Provides the BLOSUM62 protein substitution matrix, the gap symbol and
gap cost used for sum-of-pairs column scores, and the resource ceilings
applied before the product graph is allocated.
"""

import numpy as np

# Protein alphabet, in BLOSUM62 row order
RESIDUES = np.array(list("ARNDCQEGHILKMFPSTWYV"))
ALPHABET_TO_INDEX = {str(r): i for i, r in enumerate(RESIDUES)}

# BLOSUM62 substitution matrix
SCORE_MATRIX = np.array(
    [
        [ 4, -1, -2, -2,  0, -1, -1,  0, -2, -1, -1, -1, -1, -2, -1,  1,  0, -3, -2,  0],
        [-1,  5,  0, -2, -3,  1,  0, -2,  0, -3, -2,  2, -1, -3, -2, -1, -1, -3, -2, -3],
        [-2,  0,  6,  1, -3,  0,  0,  0,  1, -3, -3,  0, -2, -3, -2,  1,  0, -4, -2, -3],
        [-2, -2,  1,  6, -3,  0,  2, -1, -1, -3, -4, -1, -3, -3, -1,  0, -1, -4, -3, -3],
        [ 0, -3, -3, -3,  9, -3, -4, -3, -3, -1, -1, -3, -1, -2, -3, -1, -1, -2, -2, -1],
        [-1,  1,  0,  0, -3,  5,  2, -2,  0, -3, -2,  1,  0, -3, -1,  0, -1, -2, -1, -2],
        [-1,  0,  0,  2, -4,  2,  5, -2,  0, -3, -3,  1, -2, -3, -1,  0, -1, -3, -2, -2],
        [ 0, -2,  0, -1, -3, -2, -2,  6, -2, -4, -4, -2, -3, -3, -2,  0, -2, -2, -3, -3],
        [-2,  0,  1, -1, -3,  0,  0, -2,  8, -3, -3, -1, -2, -1, -2, -1, -2, -2,  2, -3],
        [-1, -3, -3, -3, -1, -3, -3, -4, -3,  4,  2, -3,  1,  0, -3, -2, -1, -3, -1,  3],
        [-1, -2, -3, -4, -1, -2, -3, -4, -3,  2,  4, -2,  2,  0, -3, -2, -1, -2, -1,  1],
        [-1,  2,  0, -1, -3,  1,  1, -2, -1, -3, -2,  5, -1, -3, -1,  0, -1, -3, -2, -2],
        [-1, -1, -2, -3, -1,  0, -2, -3, -2,  1,  2, -1,  5,  0, -2, -1, -1, -1, -1,  1],
        [-2, -3, -3, -3, -2, -3, -3, -3, -1,  0,  0, -3,  0,  6, -4, -2, -2,  1,  3, -1],
        [-1, -2, -2, -1, -3, -1, -1, -2, -2, -3, -3, -1, -2, -4,  7, -1, -1, -4, -3, -2],
        [ 1, -1,  1,  0, -1,  0,  0,  0, -1, -2, -2,  0, -1, -2, -1,  4,  1, -3, -2, -2],
        [ 0, -1,  0, -1, -1, -1, -1, -2, -2, -1, -1, -1, -1, -2, -1,  1,  5, -2, -2,  0],
        [-3, -3, -4, -4, -2, -2, -3, -2, -2, -3, -2, -3, -1,  1, -4, -3, -2, 11,  2, -3],
        [-2, -2, -2, -3, -2, -1, -2, -3,  2, -1, -1, -2, -1,  3, -3, -2, -2,  2,  7, -1],
        [ 0, -3, -3, -3, -1, -2, -2, -3, -3,  3,  1, -2,  1, -1, -2, -2,  0, -3, -1,  4],
    ],
    dtype=float,
)
SCORE_MATRIX.setflags(write=False)

## Gap symbol and the (linear) cost of aligning it against a residue
GAP_CHAR = "-"
GAP_COST = -6.0

## Ceilings checked before the product graph is allocated
MAX_VERTICES = 2_000_000
MAX_EDGES = 7 * MAX_VERTICES


def align_params(*, global_alignment: bool = True) -> dict:
    """
    Bundle default resource ceilings and constraints into a dict for easy unpacking.

    Parameters:
        global_alignment (bool): If True, constrain the path to run from
            (0, 0, 0) to (n1, n2, n3); otherwise leave both ends free.

    Usage:
        result = align_with_constraints(s1, s2, s3, **align_params(global_alignment=False))"""
    return {
        "constrain_start": global_alignment,
        "constrain_end": global_alignment,
        "max_vertices": MAX_VERTICES,
        "max_edges": MAX_EDGES,
    }


def get_default_scoring():
    """
    Convenience helper returning the default scoring components:

        score_matrix, alphabet_to_index, gap_cost, gap_char
    """
    return (
        SCORE_MATRIX,
        ALPHABET_TO_INDEX,
        GAP_COST,
        GAP_CHAR,
    )
