"""Keypoint orientation by intensity centroid and rotated BRIEF descriptors."""

from __future__ import annotations

import math
from dataclasses import replace

import numpy as np

from .keypoint import KeyPoint

HALF_PATCH_SIZE = 15
DESCRIPTOR_BYTES = 32
_PATTERN_POINTS = DESCRIPTOR_BYTES * 8 * 2
_FACTOR_PI = np.float32(math.pi / 180.0)


def fast_atan2(y, x) -> float:
    """Return the angle of the vector ``(x, y)`` in degrees, in ``[0, 360)``."""
    degrees = math.degrees(math.atan2(float(y), float(x)))
    if degrees < 0.0:
        degrees += 360.0
    if degrees >= 360.0:
        degrees = 0.0
    return degrees


def compute_umax() -> list[int]:
    """Return, for each row offset of the circular patch, its half width."""
    umax = [0] * (HALF_PATCH_SIZE + 1)
    vmax = math.floor(HALF_PATCH_SIZE * math.sqrt(2.0) / 2 + 1)
    vmin = math.ceil(HALF_PATCH_SIZE * math.sqrt(2.0) / 2)
    hp2 = HALF_PATCH_SIZE * HALF_PATCH_SIZE
    for v in range(vmax + 1):
        umax[v] = round(math.sqrt(hp2 - v * v))

    # Mirror the upper octant so that the patch is symmetric.
    v0 = 0
    for v in range(HALF_PATCH_SIZE, vmin - 1, -1):
        while umax[v0] == umax[v0 + 1]:
            v0 += 1
        umax[v] = v0
        v0 += 1
    return umax


def _check_inside(shape, rows, cols) -> None:
    height, width = shape
    if np.min(rows) < 0 or np.max(rows) >= height or np.min(cols) < 0 or np.max(cols) >= width:
        raise ValueError("keypoint patch reaches outside the image")


def ic_angle(image, x, y, umax) -> float:
    """Return the orientation in degrees of the intensity centroid around ``(x, y)``."""
    img = np.asarray(image)
    if img.ndim != 2:
        raise ValueError("expected a single-channel 2-D image")
    half = len(umax) - 1
    cx, cy = round(x), round(y)
    _check_inside(img.shape, np.array([cy - half, cy + half]), np.array([cx - half, cx + half]))

    patch = img[cy - half:cy + half + 1, cx - half:cx + half + 1].astype(np.int64)
    m_10 = int(np.arange(-half, half + 1) @ patch[half])
    m_01 = 0
    for v in range(1, half + 1):
        d = umax[v]
        plus = patch[half + v, half - d:half + d + 1]
        minus = patch[half - v, half - d:half + d + 1]
        m_01 += v * int((plus - minus).sum())
        m_10 += int(np.arange(-d, d + 1) @ (plus + minus))
    return fast_atan2(float(m_01), float(m_10))


def compute_orientation(image, keypoints, umax) -> list[KeyPoint]:
    """Return the keypoints with their ``angle`` set from the image."""
    return [replace(kp, angle=ic_angle(image, kp.x, kp.y, umax)) for kp in keypoints]


def compute_orb_descriptor(image, keypoint, pattern) -> np.ndarray:
    """Return the 32-byte descriptor of one keypoint, steered by its angle."""
    img = np.asarray(image)
    if img.ndim != 2:
        raise ValueError("expected a single-channel 2-D image")
    points = np.asarray(pattern, dtype=np.float32)
    if points.shape != (_PATTERN_POINTS, 2):
        raise ValueError(f"pattern must hold {_PATTERN_POINTS} (x, y) points")

    angle = np.float32(keypoint.angle) * _FACTOR_PI
    a = np.float32(math.cos(angle))
    b = np.float32(math.sin(angle))
    px, py = points[:, 0], points[:, 1]
    rows = round(keypoint.y) + np.rint(px * b + py * a).astype(np.int64)
    cols = round(keypoint.x) + np.rint(px * a - py * b).astype(np.int64)
    _check_inside(img.shape, rows, cols)

    values = img[rows, cols].astype(np.int32)
    bits = (values[0::2] < values[1::2]).reshape(DESCRIPTOR_BYTES, 8)
    return np.packbits(bits, axis=1, bitorder="little").ravel()


def compute_descriptors(image, keypoints, pattern) -> np.ndarray:
    """Return one descriptor row per keypoint as a ``(n, 32)`` uint8 array."""
    rows = [compute_orb_descriptor(image, kp, pattern) for kp in keypoints]
    if not rows:
        return np.zeros((0, DESCRIPTOR_BYTES), dtype=np.uint8)
    return np.stack(rows)