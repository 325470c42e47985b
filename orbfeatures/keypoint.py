"""Keypoint record shared by the extractor, the descriptor code and the matcher."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class KeyPoint:
    """A detected image feature.

    ``x`` and ``y`` are pixel coordinates. ``size`` is the diameter of the
    patch the feature was described with, ``angle`` its orientation in
    degrees (``-1`` when not yet computed), ``response`` the detector score
    and ``octave`` the pyramid level it was found on.
    """

    x: float
    y: float
    size: float = 0.0
    angle: float = -1.0
    response: float = 0.0
    octave: int = 0

    @property
    def pt(self) -> tuple[float, float]:
        """The position as an ``(x, y)`` pair."""
        return (self.x, self.y)

    def shifted(self, dx: float, dy: float) -> KeyPoint:
        """Return a copy moved by ``(dx, dy)``; every other field is kept."""
        return replace(self, x=self.x + dx, y=self.y + dy)

    def scaled(self, factor: float) -> KeyPoint:
        """Return a copy whose position is multiplied by ``factor``."""
        return replace(self, x=self.x * factor, y=self.y * factor)