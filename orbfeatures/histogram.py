"""Rotation histogram used to drop matches whose orientation change disagrees with the rest."""

from __future__ import annotations

import math
from collections.abc import Sequence

HISTO_LENGTH = 30
_MINOR_PEAK_RATIO = 0.1


def _count(entry) -> int:
    if isinstance(entry, int):
        return entry
    return len(entry)


def compute_three_maxima(histogram: Sequence) -> tuple[int, int, int]:
    """Return the indices of the three fullest bins, fullest first.

    Each bin is either a count or a sized collection. Ties keep the earlier
    bin. A missing index is ``-1``; the second and third peaks are dropped
    when they hold fewer than a tenth of the first.
    """
    max1 = max2 = max3 = 0
    ind1 = ind2 = ind3 = -1
    for i, entry in enumerate(histogram):
        s = _count(entry)
        if s > max1:
            max3, max2, max1 = max2, max1, s
            ind3, ind2, ind1 = ind2, ind1, i
        elif s > max2:
            max3, max2 = max2, s
            ind3, ind2 = ind2, i
        elif s > max3:
            max3 = s
            ind3 = i

    if max2 < _MINOR_PEAK_RATIO * max1:
        ind2 = ind3 = -1
    elif max3 < _MINOR_PEAK_RATIO * max1:
        ind3 = -1
    return ind1, ind2, ind3


def rotation_bin(angle1, angle2, length=HISTO_LENGTH) -> int:
    """Return the histogram bin of the rotation from ``angle2`` to ``angle1``.

    The difference in degrees is wrapped into ``[0, 360)``, multiplied by
    ``1 / length`` and rounded half away from zero; a result equal to
    ``length`` wraps to bin 0.
    """
    if length <= 0:
        raise ValueError("histogram length must be positive")
    rot = float(angle1) - float(angle2)
    if rot < 0.0:
        rot += 360.0
    bin_index = math.floor(rot * (1.0 / length) + 0.5)
    if bin_index == length:
        bin_index = 0
    if not 0 <= bin_index < length:
        raise ValueError(f"rotation {rot} falls outside a histogram of {length} bins")
    return bin_index


class RotationHistogram:
    """Collects match indices by rotation bin and reports the inconsistent ones."""

    def __init__(self, length=HISTO_LENGTH):
        if length <= 0:
            raise ValueError("histogram length must be positive")
        self.length = length
        self.bins: list[list[int]] = [[] for _ in range(length)]

    def add(self, angle1, angle2, index) -> int:
        """Record match ``index`` under the bin of its rotation; return that bin."""
        bin_index = rotation_bin(angle1, angle2, self.length)
        self.bins[bin_index].append(index)
        return bin_index

    def inconsistent(self) -> list[int]:
        """Return, in bin order, the indices recorded outside the three main peaks."""
        peaks = set(compute_three_maxima(self.bins))
        return [
            index
            for i, entries in enumerate(self.bins)
            if i not in peaks
            for index in entries
        ]