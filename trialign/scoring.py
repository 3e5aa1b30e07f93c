"""
scoring.py — residue scoring for three-way alignment columns

A ScoringModel wraps a symmetric substitution matrix σ over an alphabet Σ
together with a single linear gap cost g:

    s(a, b) = σ(a, b)   if a, b ∈ Σ
            = g         if exactly one of a, b is the gap symbol
            = 0         if both are gaps

The weight of an alignment column (a, b, c) is the sum of pairs

    SP(a, b, c) = s(a, b) + s(b, c) + s(a, c).

For graph construction the model also exposes the same quantities as
dense lookup tables over integer symbol codes, with the gap encoded as
code K = |Σ|, so that every edge of the product graph can be weighted
with a single array gather.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence

import numpy as np
from numpy.typing import NDArray

from . import default
from .errors import MalformedInputError


@dataclass(eq=False)
class ScoringModel:
    """
    Substitution matrix plus linear gap cost.

    Attributes
    ----------
    score_matrix : (K, K) array
        Symmetric substitution scores σ, indexed by alphabet_to_index.

    alphabet_to_index : mapping str -> int
        Maps each single-character residue to a row/column of score_matrix.

    gap_cost : float
        Score of aligning a residue against the gap symbol.

    gap_char : str
        The gap symbol.  Must not be part of the alphabet.
    """

    score_matrix: NDArray[np.floating]
    alphabet_to_index: Mapping[str, int]
    gap_cost: float = default.GAP_COST
    gap_char: str = default.GAP_CHAR

    _pair_table: NDArray[np.floating] = field(init=False, repr=False)
    _sp_table: NDArray[np.floating] = field(init=False, repr=False)
    _symbols: NDArray[np.str_] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        matrix = np.asarray(self.score_matrix, dtype=float)
        K = len(self.alphabet_to_index)
        if matrix.shape != (K, K):
            raise ValueError(
                f"score_matrix must be ({K}, {K}) for an alphabet of {K} symbols, "
                f"got shape {matrix.shape}"
            )
        if not np.array_equal(matrix, matrix.T):
            raise ValueError("score_matrix must be symmetric")
        if sorted(self.alphabet_to_index.values()) != list(range(K)):
            raise ValueError("alphabet_to_index must map onto 0..K-1 exactly once")
        for symbol in self.alphabet_to_index:
            if len(symbol) != 1:
                raise ValueError(f"Alphabet symbols must be single characters, got {symbol!r}")
        if len(self.gap_char) != 1:
            raise ValueError(f"gap_char must be a single character, got {self.gap_char!r}")
        if self.gap_char in self.alphabet_to_index:
            raise ValueError(f"gap_char {self.gap_char!r} is part of the alphabet")

        self.score_matrix = matrix
        self.gap_cost = float(self.gap_cost)

        # Pair table over codes 0..K, code K being the gap
        pair = np.full((K + 1, K + 1), self.gap_cost, dtype=float)
        pair[:K, :K] = matrix
        pair[K, K] = 0.0
        pair.setflags(write=False)
        self._pair_table = pair

        a = pair[:, :, None]  # s(a, b)
        b = pair[None, :, :]  # s(b, c)
        c = pair[:, None, :]  # s(a, c)
        sp = a + b + c
        sp.setflags(write=False)
        self._sp_table = sp

        symbols = np.empty(K + 1, dtype="<U1")
        for symbol, index in self.alphabet_to_index.items():
            symbols[index] = symbol
        symbols[K] = self.gap_char
        self._symbols = symbols

    # ------------------------------------------------------------------
    # Symbol-level scores
    # ------------------------------------------------------------------

    def pairwise_score(self, a: str, b: str) -> float:
        """
        Return s(a, b) for two symbols, either of which may be the gap.

        Raises
        ------
        MalformedInputError
            If a non-gap symbol is not in the alphabet.
        """
        return float(self._pair_table[self.symbol_code(a), self.symbol_code(b)])

    def sum_of_pairs(self, a: str, b: str, c: str) -> float:
        """Return the sum-of-pairs weight of the column (a, b, c)."""
        return (
            self.pairwise_score(a, b)
            + self.pairwise_score(b, c)
            + self.pairwise_score(a, c)
        )

    # ------------------------------------------------------------------
    # Code-level tables
    # ------------------------------------------------------------------

    @property
    def gap_code(self) -> int:
        """Integer code used for the gap symbol (the alphabet size K)."""
        return len(self.alphabet_to_index)

    @property
    def symbols(self) -> NDArray[np.str_]:
        """Symbol for each code 0..K, gap last."""
        return self._symbols

    def symbol_code(self, symbol: str) -> int:
        if symbol == self.gap_char:
            return self.gap_code
        try:
            return self.alphabet_to_index[symbol]
        except KeyError:
            raise MalformedInputError(
                f"Symbol {symbol!r} is not in the scoring alphabet"
            ) from None

    def encode(self, sequence: Sequence[str]) -> NDArray[np.int32]:
        """
        Encode a sequence of residues into int32 codes.

        The gap symbol is rejected here: a gap inside an input sequence
        would make an edge label disagree with its coordinate step.
        """
        codes = np.empty(len(sequence), dtype=np.int32)
        lookup = self.alphabet_to_index
        for pos in range(len(sequence)):
            residue = sequence[pos]
            try:
                codes[pos] = lookup[residue]
            except (KeyError, TypeError):
                raise MalformedInputError(
                    f"Symbol {residue!r} at position {pos} is not in the scoring alphabet"
                ) from None
        return codes

    def pair_table(self) -> NDArray[np.floating]:
        """(K+1, K+1) read-only table of s(a, b) over codes, gap = K."""
        return self._pair_table

    def sum_of_pairs_table(self) -> NDArray[np.floating]:
        """(K+1, K+1, K+1) read-only table of SP(a, b, c) over codes, gap = K."""
        return self._sp_table


# ---------------------------------------------------------------------------
# Default model and module-level helpers
# ---------------------------------------------------------------------------

BLOSUM62 = ScoringModel(
    score_matrix=default.SCORE_MATRIX,
    alphabet_to_index=default.ALPHABET_TO_INDEX,
    gap_cost=default.GAP_COST,
    gap_char=default.GAP_CHAR,
)


def pairwise_score(a: str, b: str) -> float:
    """s(a, b) under BLOSUM62 with the default gap cost."""
    return BLOSUM62.pairwise_score(a, b)


def sum_of_pairs(a: str, b: str, c: str) -> float:
    """SP(a, b, c) under BLOSUM62 with the default gap cost."""
    return BLOSUM62.sum_of_pairs(a, b, c)
