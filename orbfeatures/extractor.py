"""Multi-scale ORB keypoint detection and description."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace

import numpy as np

from .descriptor import DESCRIPTOR_BYTES, compute_descriptors, compute_orientation, compute_umax
from .imaging import fast, gaussian_blur, resize_linear
from .keypoint import KeyPoint
from .octree import distribute_oct_tree
from .pattern import orb_pattern

PATCH_SIZE = 31
EDGE_THRESHOLD = 19
_CELL_SIZE = 30.0


def retain_best(keypoints, n) -> list[KeyPoint]:
    """Keep the ``n`` strongest keypoints, plus any tied with the weakest kept.

    A negative ``n`` or one at least the number of keypoints keeps them all
    in their order; otherwise the result is ordered by falling response.
    """
    keys = list(keypoints)
    if n < 0 or len(keys) <= n:
        return keys
    if n == 0:
        return []
    ranked = sorted(keys, key=lambda kp: kp.response, reverse=True)
    threshold = ranked[n - 1].response
    return [kp for kp in ranked if kp.response >= threshold]


@dataclass
class _Cell:
    x0: int
    y0: int
    keys: list[KeyPoint] = field(default_factory=list)
    total: int = 0
    retain: int = 0
    no_more: bool = False


class ORBExtractor:
    """Detects FAST corners over a scale pyramid and describes them with ORB."""

    def __init__(self, n_features, scale_factor, n_levels, ini_th_fast, min_th_fast):
        if n_levels < 1:
            raise ValueError("at least one pyramid level is required")
        if scale_factor <= 1.0:
            raise ValueError("scale factor must be greater than 1")
        if n_features < 0:
            raise ValueError("number of features must not be negative")
        self.n_features = n_features
        self.scale_factor = scale_factor
        self.n_levels = n_levels
        self.ini_th_fast = ini_th_fast
        self.min_th_fast = min_th_fast

        self.scale_factors = [1.0]
        for _ in range(1, n_levels):
            self.scale_factors.append(self.scale_factors[-1] * scale_factor)
        self.level_sigma2 = [s * s for s in self.scale_factors]
        self.inv_scale_factors = [1.0 / s for s in self.scale_factors]
        self.inv_level_sigma2 = [1.0 / s2 for s2 in self.level_sigma2]

        factor = 1.0 / scale_factor
        desired = n_features * (1 - factor) / (1 - factor ** n_levels)
        per_level = []
        for _ in range(n_levels - 1):
            per_level.append(round(desired))
            desired *= factor
        per_level.append(max(n_features - sum(per_level), 0))
        self.features_per_level = per_level

        self.pattern = orb_pattern()
        self.umax = compute_umax()
        self.image_pyramid: list[np.ndarray] = []

    def compute_pyramid(self, image) -> list[np.ndarray]:
        """Build and store the image pyramid, one downscaled image per level."""
        img = np.asarray(image)
        if img.ndim != 2 or img.dtype != np.uint8:
            raise ValueError("expected an 8-bit single-channel image")
        if img.size == 0:
            raise ValueError("image is empty")
        rows, cols = img.shape
        pyramid: list[np.ndarray] = []
        for level, scale in enumerate(self.inv_scale_factors):
            if level == 0:
                pyramid.append(img.copy())
                continue
            width, height = round(cols * scale), round(rows * scale)
            if width < 1 or height < 1:
                raise ValueError(f"pyramid level {level} would be empty")
            pyramid.append(resize_linear(pyramid[-1], width, height))
        self.image_pyramid = pyramid
        return pyramid

    def _require_pyramid(self) -> list[np.ndarray]:
        if not self.image_pyramid:
            raise RuntimeError("no image pyramid has been computed")
        return self.image_pyramid

    def _detect(self, cell: np.ndarray, retry) -> list[KeyPoint]:
        if cell.size == 0:
            return []
        found = fast(cell, self.ini_th_fast, True)
        if retry(found):
            found = fast(cell, self.min_th_fast, True)
        return found

    def compute_keypoints_octtree(self) -> list[list[KeyPoint]]:
        """Detect keypoints per level on a grid and spread them with a quad-tree."""
        all_keypoints = []
        for level, img in enumerate(self._require_pyramid()):
            rows, cols = img.shape
            min_border = EDGE_THRESHOLD - 3
            max_border_x = cols - EDGE_THRESHOLD + 3
            max_border_y = rows - EDGE_THRESHOLD + 3
            width = float(max_border_x - min_border)
            height = float(max_border_y - min_border)
            n_cols = int(width / _CELL_SIZE)
            n_rows = int(height / _CELL_SIZE)
            if n_cols < 1 or n_rows < 1:
                raise ValueError(f"pyramid level {level} is too small to detect features")
            w_cell = math.ceil(width / n_cols)
            h_cell = math.ceil(height / n_rows)

            to_distribute: list[KeyPoint] = []
            for i in range(n_rows):
                ini_y = min_border + i * h_cell
                if ini_y >= max_border_y - 3:
                    continue
                max_y = min(ini_y + h_cell + 6, max_border_y)
                for j in range(n_cols):
                    ini_x = min_border + j * w_cell
                    if ini_x >= max_border_x - 6:
                        continue
                    max_x = min(ini_x + w_cell + 6, max_border_x)
                    found = self._detect(img[ini_y:max_y, ini_x:max_x], lambda keys: not keys)
                    to_distribute.extend(kp.shifted(j * w_cell, i * h_cell) for kp in found)

            kept = distribute_oct_tree(
                to_distribute, min_border, max_border_x, min_border, max_border_y,
                self.features_per_level[level],
            )
            patch = int(PATCH_SIZE * self.scale_factors[level])
            placed = [
                replace(kp.shifted(min_border, min_border), octave=level, size=patch) for kp in kept
            ]
            all_keypoints.append(compute_orientation(img, placed, self.umax))
        return all_keypoints

    def compute_keypoints_old(self) -> list[list[KeyPoint]]:
        """Detect keypoints per level on a fixed grid, sharing a quota between cells."""
        pyramid = self._require_pyramid()
        image_ratio = pyramid[0].shape[1] / pyramid[0].shape[0]
        all_keypoints = []
        for level, img in enumerate(pyramid):
            rows, cols = img.shape
            n_desired = self.features_per_level[level]
            level_cols = int(math.sqrt(n_desired / (5 * image_ratio)))
            level_rows = int(image_ratio * level_cols)
            max_border_x = cols - EDGE_THRESHOLD
            max_border_y = rows - EDGE_THRESHOLD
            width = max_border_x - EDGE_THRESHOLD
            height = max_border_y - EDGE_THRESHOLD
            if level_cols < 1 or level_rows < 1 or width <= 0 or height <= 0:
                raise ValueError(f"pyramid level {level} cannot be divided into cells")
            cell_w = math.ceil(width / level_cols)
            cell_h = math.ceil(height / level_rows)
            n_cells = level_rows * level_cols
            per_cell = math.ceil(n_desired / n_cells)

            grid = [
                [_Cell(EDGE_THRESHOLD + j * cell_w - 3, EDGE_THRESHOLD + i * cell_h - 3)
                 for j in range(level_cols)]
                for i in range(level_rows)
            ]
            n_no_more = 0
            n_to_distribute = 0

            for i, row in enumerate(grid):
                h_y = cell_h + 6
                if i == level_rows - 1:
                    h_y = max_border_y + 3 - row[0].y0
                    if h_y <= 0:
                        continue
                for j, cell in enumerate(row):
                    h_x = cell_w + 6
                    if j == level_cols - 1:
                        h_x = max_border_x + 3 - cell.x0
                        if h_x <= 0:
                            continue
                    region = img[cell.y0:cell.y0 + h_y, cell.x0:cell.x0 + h_x]
                    cell.keys = self._detect(region, lambda keys: len(keys) <= 3)
                    cell.total = len(cell.keys)
                    if cell.total > per_cell:
                        cell.retain = per_cell
                    else:
                        cell.retain = cell.total
                        n_to_distribute += per_cell - cell.total
                        cell.no_more = True
                        n_no_more += 1

            cells = [cell for row in grid for cell in row]
            while n_to_distribute > 0 and n_no_more < n_cells:
                new_per_cell = per_cell + math.ceil(n_to_distribute / (n_cells - n_no_more))
                n_to_distribute = 0
                for cell in cells:
                    if cell.no_more:
                        continue
                    if cell.total > new_per_cell:
                        cell.retain = new_per_cell
                    else:
                        cell.retain = cell.total
                        n_to_distribute += new_per_cell - cell.total
                        cell.no_more = True
                        n_no_more += 1

            patch = int(PATCH_SIZE * self.scale_factors[level])
            keypoints: list[KeyPoint] = []
            for cell in cells:
                best = retain_best(cell.keys, cell.retain)[:cell.retain]
                keypoints.extend(
                    replace(kp.shifted(cell.x0, cell.y0), octave=level, size=patch) for kp in best
                )
            if len(keypoints) > n_desired:
                keypoints = retain_best(keypoints, n_desired)[:n_desired]
            all_keypoints.append(compute_orientation(img, keypoints, self.umax))
        return all_keypoints

    def extract(self, image) -> tuple[list[KeyPoint], np.ndarray]:
        """Return the keypoints in full-image coordinates and their descriptors."""
        img = np.asarray(image)
        if img.size == 0:
            return [], np.zeros((0, DESCRIPTOR_BYTES), dtype=np.uint8)
        self.compute_pyramid(img)
        per_level = self.compute_keypoints_octtree()

        keypoints: list[KeyPoint] = []
        blocks: list[np.ndarray] = []
        for level, (level_image, level_keys) in enumerate(zip(self.image_pyramid, per_level)):
            if not level_keys:
                continue
            working = gaussian_blur(level_image, 7, 2.0)
            blocks.append(compute_descriptors(working, level_keys, self.pattern))
            if level != 0:
                scale = self.scale_factors[level]
                level_keys = [kp.scaled(scale) for kp in level_keys]
            keypoints.extend(level_keys)

        if not blocks:
            return keypoints, np.zeros((0, DESCRIPTOR_BYTES), dtype=np.uint8)
        return keypoints, np.vstack(blocks)

    def __call__(self, image) -> tuple[list[KeyPoint], np.ndarray]:
        return self.extract(image)