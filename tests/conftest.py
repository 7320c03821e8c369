"""Pytest configuration and shared fixtures for the dice search tests."""

from pathlib import Path
import sys

import pytest
import torch

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

import nontransitive_dice as nd


EFRON_DICE = [
    [0, 0, 4, 4, 4, 4],
    [3, 3, 3, 3, 3, 3],
    [2, 2, 2, 2, 6, 6],
    [1, 1, 1, 5, 5, 5],
]


@pytest.fixture
def efron_dice():
    """Efron's four dice in beating order A > B > C > D > A."""
    return [list(die) for die in EFRON_DICE]


@pytest.fixture(scope="session")
def universe():
    return nd.build_universe()


@pytest.fixture(scope="session")
def odds_matrix(universe):
    return nd.build_odds_matrix(torch.tensor(universe, dtype=torch.int64))


@pytest.fixture(scope="session")
def full_cycles(odds_matrix):
    """Every cycle of the default 6-face, 7-label search (computed once)."""
    return list(nd.find_cycles(odds_matrix))


@pytest.fixture(scope="session")
def small_universe():
    """Tetrahedral dice with five labels: C(8, 4) = 70 dice."""
    return nd.build_universe(4, 5)
