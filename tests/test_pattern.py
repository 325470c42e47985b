import numpy as np

from orbfeatures.pattern import orb_pattern


def test_shape_is_512_points():
    pattern = orb_pattern()
    assert pattern.shape == (512, 2)


def test_first_and_last_pairs_match_table():
    pattern = orb_pattern()
    assert pattern[0].tolist() == [8, -3]
    assert pattern[1].tolist() == [9, 5]
    assert pattern[-2].tolist() == [-1, -6]
    assert pattern[-1].tolist() == [0, -11]


def test_points_lie_inside_patch():
    pattern = orb_pattern()
    assert pattern.min() >= -13
    assert pattern.max() <= 12


def test_no_pair_compares_a_point_with_itself():
    pairs = orb_pattern().reshape(-1, 2, 2)
    assert pairs.shape[0] == 256
    same = np.all(pairs[:, 0, :] == pairs[:, 1, :], axis=1)
    assert not same.any()


def test_each_call_returns_an_independent_copy():
    first = orb_pattern()
    first[:] = 0
    second = orb_pattern()
    assert second[0].tolist() == [8, -3]
    assert np.array_equal(second, orb_pattern())