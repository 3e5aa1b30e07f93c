"""
conftest.py — Shared pytest fixtures for the trialign test suite

Provides a small DNA scoring model for hand-checkable cases, the default
BLOSUM62 model, and seeded random generators for randomized tests.
"""

import pytest
import numpy as np

from trialign import default
from trialign.scoring import BLOSUM62, ScoringModel
from trialign.validation import random_protein


# ---------------------------------------------------------------------------
# Scoring fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def dna_scoring() -> ScoringModel:
    """Simple match/mismatch model: +5 on diagonal, -4 off-diagonal, gap -3."""
    mat = np.full((4, 4), -4.0, dtype=float)
    np.fill_diagonal(mat, 5.0)
    return ScoringModel(
        score_matrix=mat,
        alphabet_to_index={b: i for i, b in enumerate("ACGT")},
        gap_cost=-3.0,
    )


@pytest.fixture
def blosum62() -> ScoringModel:
    """Default BLOSUM62 model with gap cost -6."""
    return BLOSUM62


@pytest.fixture
def residues():
    """Default protein alphabet."""
    return default.RESIDUES


# ---------------------------------------------------------------------------
# Random number generator fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def rng():
    """Seeded random generator for reproducible tests."""
    return np.random.default_rng(888)


@pytest.fixture
def rng_alt():
    """Alternative seed for diversity in randomized tests."""
    return np.random.default_rng(123)


# ---------------------------------------------------------------------------
# Sequence generation helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def random_protein_factory():
    """Factory fixture returning a function to generate random protein strings."""
    def _random_protein(length: int, rng: np.random.Generator) -> str:
        return random_protein(length, rng)
    return _random_protein
