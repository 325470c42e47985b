import dataclasses

import pytest

from orbfeatures.keypoint import KeyPoint


def _sample():
    return KeyPoint(x=10.5, y=-4.25, size=31.0, angle=45.0, response=12.0, octave=2)


def test_defaults_follow_undetermined_orientation():
    kp = KeyPoint(1.0, 2.0)
    assert kp.angle == -1.0
    assert kp.octave == 0
    assert kp.pt == (1.0, 2.0)


def test_shifted_moves_position_only():
    kp = _sample()
    moved = kp.shifted(2.0, 3.0)
    assert moved.pt == (12.5, -1.25)
    assert (moved.size, moved.angle, moved.response, moved.octave) == (
        kp.size,
        kp.angle,
        kp.response,
        kp.octave,
    )


@pytest.mark.parametrize("dx,dy", [(0.0, 0.0), (5.0, -7.0), (-0.5, 0.25)])
def test_shift_round_trip(dx, dy):
    kp = _sample()
    assert kp.shifted(dx, dy).shifted(-dx, -dy) == kp


@pytest.mark.parametrize("factor", [1.0, 2.0, 0.5, 4.0])
def test_scale_round_trip(factor):
    kp = _sample()
    assert kp.scaled(factor).scaled(1.0 / factor) == kp


def test_scaled_keeps_other_fields():
    kp = _sample()
    big = kp.scaled(2.0)
    assert big.pt == (21.0, -8.5)
    assert big.octave == kp.octave
    assert big.size == kp.size
    assert big.angle == kp.angle


def test_original_is_unchanged_and_immutable():
    kp = _sample()
    kp.shifted(1.0, 1.0)
    kp.scaled(3.0)
    assert kp == _sample()
    with pytest.raises(dataclasses.FrozenInstanceError):
        kp.x = 0.0