"""Single-channel image primitives used to build pyramids and detect corners."""

from __future__ import annotations

import numpy as np

from .keypoint import KeyPoint

# Bresenham circle of radius 3 as (dx, dy) offsets, walked in order.
_CIRCLE = (
    (0, 3), (1, 3), (2, 2), (3, 1), (3, 0), (3, -1), (2, -2), (1, -3),
    (0, -3), (-1, -3), (-2, -2), (-3, -1), (-3, 0), (-3, 1), (-2, 2), (-1, 3),
)
_ARC = 9
_FAST_KEYPOINT_SIZE = 7.0

_COEF_BITS = 11
_COEF_SCALE = 1 << _COEF_BITS
_RESIZE_SHIFT = 2 * _COEF_BITS


def _as_image(image) -> np.ndarray:
    arr = np.asarray(image)
    if arr.ndim != 2:
        raise ValueError("expected a single-channel 2-D image")
    if arr.size == 0:
        raise ValueError("image is empty")
    return arr


def _as_gray8(image) -> np.ndarray:
    arr = _as_image(image)
    if arr.dtype != np.uint8:
        raise ValueError("expected an 8-bit image")
    return arr


def reflect101_border(image, pad, isolated=True) -> np.ndarray:
    """Pad ``image`` by ``pad`` pixels on every side, mirroring about the edge pixel.

    The edge row or column itself is not repeated (``cba|abcd|dcb``). An
    array never shares pixels with a parent region, so the border is always
    built from the image alone; ``isolated`` records that intent.
    """
    img = _as_image(image)
    if pad < 0:
        raise ValueError("border width must not be negative")
    if pad == 0:
        return img.copy()
    return np.pad(img, int(pad), mode="reflect")


def _linear_taps(src_size: int, dst_size: int):
    scale = src_size / dst_size
    pos = (np.arange(dst_size) + 0.5) * scale - 0.5
    left = np.floor(pos).astype(np.int64)
    frac = pos - left
    below = left < 0
    frac[below] = 0.0
    left[below] = 0
    beyond = left >= src_size - 1
    frac[beyond] = 0.0
    left[beyond] = src_size - 1
    w_left = np.round((1.0 - frac) * _COEF_SCALE).astype(np.int64)
    w_right = _COEF_SCALE - w_left
    right = np.minimum(left + 1, src_size - 1)
    return left, right, w_left, w_right


def resize_linear(image, width, height) -> np.ndarray:
    """Resize an 8-bit image to ``width`` x ``height`` with bilinear sampling.

    Pixel centres are aligned, weights use 11-bit fixed point, and an exact
    halving in both directions averages 2x2 blocks.
    """
    img = _as_gray8(image)
    if width <= 0 or height <= 0:
        raise ValueError("target size must be positive")
    rows, cols = img.shape
    if (width, height) == (cols, rows):
        return img.copy()

    data = img.astype(np.int64)
    if width * 2 == cols and height * 2 == rows:
        block = data[0::2, 0::2] + data[1::2, 0::2] + data[0::2, 1::2] + data[1::2, 1::2]
        return ((block + 2) >> 2).astype(np.uint8)

    x0, x1, wx0, wx1 = _linear_taps(cols, width)
    y0, y1, wy0, wy1 = _linear_taps(rows, height)
    horizontal = data[:, x0] * wx0 + data[:, x1] * wx1
    vertical = horizontal[y0] * wy0[:, None] + horizontal[y1] * wy1[:, None]
    result = (vertical + (1 << (_RESIZE_SHIFT - 1))) >> _RESIZE_SHIFT
    return np.clip(result, 0, 255).astype(np.uint8)


def _gaussian_kernel(ksize: int, sigma: float) -> np.ndarray:
    if sigma <= 0:
        sigma = 0.3 * ((ksize - 1) * 0.5 - 1) + 0.8
    offsets = np.arange(ksize) - (ksize - 1) / 2.0
    kernel = np.exp(-(offsets * offsets) / (2.0 * sigma * sigma))
    return kernel / kernel.sum()


def gaussian_blur(image, ksize, sigma) -> np.ndarray:
    """Blur an 8-bit image with a square Gaussian kernel of odd size ``ksize``.

    A non-positive ``sigma`` is derived from the kernel size. Borders are
    mirrored without repeating the edge pixel.
    """
    img = _as_gray8(image)
    if ksize <= 0 or ksize % 2 == 0:
        raise ValueError("kernel size must be a positive odd number")
    kernel = _gaussian_kernel(int(ksize), float(sigma))
    radius = int(ksize) // 2
    rows, cols = img.shape
    padded = np.pad(img.astype(np.float64), radius, mode="reflect")

    horizontal = sum(weight * padded[:, i:i + cols] for i, weight in enumerate(kernel))
    blurred = sum(weight * horizontal[i:i + rows, :] for i, weight in enumerate(kernel))
    return np.clip(np.rint(blurred), 0, 255).astype(np.uint8)


def fast(image, threshold, nonmax_suppression=True) -> list[KeyPoint]:
    """Detect FAST-9 corners on an 8-bit image.

    A pixel is a corner when nine contiguous pixels of its radius-3 circle
    are all brighter than it by more than ``threshold`` or all darker by more
    than ``threshold``. The response is the largest threshold at which the
    pixel would still be a corner. With suppression, only corners scoring
    strictly above all eight neighbours survive. Results are in row-major
    order.
    """
    img = _as_gray8(image)
    threshold = min(max(int(threshold), 0), 255)
    rows, cols = img.shape
    if rows < 7 or cols < 7:
        return []

    data = img.astype(np.int32)
    h, w = rows - 6, cols - 6
    center = data[3:3 + h, 3:3 + w]
    diffs = np.stack([center - data[3 + dy:3 + dy + h, 3 + dx:3 + dx + w] for dx, dy in _CIRCLE])
    ring = np.concatenate([diffs, diffs[:_ARC - 1]])

    darker = ring[0:16].copy()
    brighter = ring[0:16].copy()
    for start in range(1, _ARC):
        window = ring[start:start + 16]
        np.minimum(darker, window, out=darker)
        np.maximum(brighter, window, out=brighter)
    best = np.maximum(darker.max(axis=0), (-brighter).max(axis=0))

    inner_corner = best > threshold
    corners = np.zeros((rows, cols), dtype=bool)
    corners[3:3 + h, 3:3 + w] = inner_corner
    scores = np.zeros((rows, cols), dtype=np.int32)
    scores[3:3 + h, 3:3 + w] = np.where(inner_corner, best - 1, 0)

    keep = corners
    if nonmax_suppression:
        keep = corners.copy()
        padded = np.pad(scores, 1)
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                neighbour = padded[1 + dy:1 + dy + rows, 1 + dx:1 + dx + cols]
                keep &= scores > neighbour

    ys, xs = np.nonzero(keep)
    return [
        KeyPoint(float(x), float(y), size=_FAST_KEYPOINT_SIZE, response=float(scores[y, x]))
        for y, x in zip(ys.tolist(), xs.tolist())
    ]