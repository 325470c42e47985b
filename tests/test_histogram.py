import pytest

from orbfeatures.histogram import (
    HISTO_LENGTH,
    RotationHistogram,
    compute_three_maxima,
    rotation_bin,
)


def test_three_maxima_empty_histogram():
    assert compute_three_maxima([]) == (-1, -1, -1)


def test_three_maxima_all_empty_bins():
    assert compute_three_maxima([[] for _ in range(HISTO_LENGTH)]) == (-1, -1, -1)


def test_three_maxima_orders_by_size():
    histogram = [[0] * 3, [0] * 8, [], [0] * 5, [0] * 2]
    assert compute_three_maxima(histogram) == (1, 3, 0)


def test_three_maxima_accepts_counts():
    assert compute_three_maxima([3, 8, 0, 5, 2]) == compute_three_maxima(
        [[0] * 3, [0] * 8, [], [0] * 5, [0] * 2]
    )


def test_three_maxima_ties_keep_first():
    ind1, ind2, ind3 = compute_three_maxima([4, 4, 4, 4])
    assert (ind1, ind2, ind3) == (0, 1, 2)


def test_three_maxima_drops_small_second_peak():
    assert compute_three_maxima([20, 1, 1]) == (0, -1, -1)


def test_three_maxima_drops_only_small_third_peak():
    assert compute_three_maxima([20, 10, 1]) == (0, 1, -1)


def test_rotation_bin_same_angle_is_zero():
    assert rotation_bin(10.0, 10.0) == 0


def test_rotation_bin_wraps_negative_difference():
    assert rotation_bin(0.0, 10.0) == rotation_bin(350.0, 0.0)


def test_rotation_bin_rounds_half_up():
    assert rotation_bin(15.0, 0.0) == 1


def test_rotation_bin_stays_in_range():
    for a in range(0, 360, 7):
        for b in range(0, 360, 11):
            assert 0 <= rotation_bin(a, b) < HISTO_LENGTH


def test_rotation_bin_rejects_bad_length():
    with pytest.raises(ValueError):
        rotation_bin(1.0, 0.0, 0)


def test_histogram_rejects_bad_length():
    with pytest.raises(ValueError):
        RotationHistogram(0)


def test_histogram_add_returns_bin():
    hist = RotationHistogram()
    assert hist.add(30.0, 0.0, 7) == rotation_bin(30.0, 0.0)
    assert hist.bins[rotation_bin(30.0, 0.0)] == [7]


def test_histogram_consistent_matches_kept():
    hist = RotationHistogram()
    for i in range(5):
        hist.add(40.0, 0.0, i)
    assert hist.inconsistent() == []


def test_histogram_reports_outlier():
    hist = RotationHistogram()
    for i in range(20):
        hist.add(0.0, 0.0, i)
    hist.add(150.0, 0.0, 99)
    assert hist.inconsistent() == [99]


def test_histogram_keeps_three_peaks_and_drops_fourth():
    hist = RotationHistogram()
    index = 0
    for angle, count in ((0.0, 10), (60.0, 9), (120.0, 8), (180.0, 7)):
        for _ in range(count):
            hist.add(angle, 0.0, index)
            index += 1
    dropped = hist.inconsistent()
    assert dropped == list(range(27, 34))
    assert len(dropped) == len(hist.bins[rotation_bin(180.0, 0.0)])