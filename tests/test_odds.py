import random

import torch

import nontransitive_dice as nd


def test_odds_counts_strict_wins_only():
    assert nd.odds([3] * 6, [3] * 6) == (0, 0)
    assert nd.odds([0, 0, 4, 4, 4, 4], [3] * 6) == (24, 12)
    assert nd.odds([6] * 6, [0] * 6) == (36, 0)


def test_odds_symmetry_and_bound(universe):
    rng = random.Random(7)
    for _ in range(500):
        x, y = rng.choice(universe), rng.choice(universe)
        w1, w2 = nd.odds(x, y)
        assert nd.odds(y, x) == (w2, w1)
        assert w1 >= 0 and w2 >= 0
        assert w1 + w2 <= nd.N_FACES * nd.N_FACES


def test_odds_matrix_matches_scalar_odds(universe, odds_matrix):
    assert odds_matrix.shape == (924, 924)
    rng = random.Random(11)
    for _ in range(500):
        i, j = rng.randrange(924), rng.randrange(924)
        assert nd.odds(universe[i], universe[j]) == (odds_matrix[i, j].item(), odds_matrix[j, i].item())


def test_odds_matrix_chunk_size_does_not_change_result(small_universe):
    dice = torch.tensor(small_universe, dtype=torch.int64)
    full = nd.build_odds_matrix(dice, row_chunk_size=len(small_universe))
    chunked = nd.build_odds_matrix(dice, row_chunk_size=3)
    assert torch.equal(full, chunked)
    assert torch.all(torch.diagonal(full) == 0)


def test_ratio_keys_mark_only_strict_edges(efron_dice):
    wins = nd.build_odds_matrix(torch.tensor(efron_dice + [[3] * 6], dtype=torch.int64))
    keys = nd.ratio_keys(wins)
    # A beats B 24:12, B loses to A, B ties the extra all-threes die
    assert keys[0, 1] >= 0
    assert keys[1, 0] == -1
    assert keys[1, 4] == -1
    assert keys[1, 1] == -1


def test_ratio_keys_equal_exactly_for_equal_cross_products():
    wins = torch.tensor([
        [0, 24, 20, 9],
        [12, 0, 10, 3],
        [10, 5, 0, 6],
        [4, 1, 2, 0],
    ])
    keys = nd.ratio_keys(wins)
    # 24:12 and 10:5 are both 2:1; 20:10 is 2:1 as well; 9:4 is not
    assert keys[0, 1] == keys[1, 2] == keys[0, 2]
    assert keys[0, 3] != keys[0, 1]
    assert keys[1, 3] == keys[2, 3]
    assert keys[2, 3] != keys[0, 1]
