# orbfeatures

Oriented FAST and rotated BRIEF (ORB) features in Python on top of NumPy.

The package builds a scale pyramid from a grayscale image, detects FAST corners
cell by cell, spreads them evenly over each level with a quadtree, measures each
corner's orientation by intensity centroid and computes 256-bit rotated BRIEF
descriptors. It also provides the rotation histogram used to keep only matches
whose change of orientation agrees with the dominant ones.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Extracting features

```python
import numpy as np
from orbfeatures.extractor import ORBExtractor

image = np.asarray(..., dtype=np.uint8)  # a 2-D grayscale image

extractor = ORBExtractor(
    n_features=1000, scale_factor=1.2, n_levels=8, ini_th_fast=20, min_th_fast=7
)
keypoints, descriptors = extractor(image)  # same as extractor.extract(image)
```

`keypoints` is a list of `orbfeatures.keypoint.KeyPoint` objects in the
coordinates of the original image, each with its pyramid level (`octave`),
patch size, orientation in degrees (`angle`) and FAST score (`response`).
`descriptors` is a `uint8` array with one 32-byte row per keypoint, in the same
order. An empty image gives no keypoints and a `(0, 32)` array.

The image must be a 2-D `uint8` array; anything else raises `ValueError`, as do
a `scale_factor` not above 1, fewer than one level, a negative `n_features`,
and a pyramid level too small to be divided into detection cells.

After construction the extractor exposes `scale_factors`, `inv_scale_factors`,
`level_sigma2`, `inv_level_sigma2` and `features_per_level` (how many of the
`n_features` each level aims for). After an extraction, `image_pyramid` holds
the image of every level.

The steps can also be run separately: `compute_pyramid(image)` builds and
stores the pyramid, `compute_keypoints_octtree()` returns the oriented
keypoints of each level in level coordinates, and `compute_keypoints_old()` is
an alternative detector that shares a per-cell quota over a fixed grid.
`orbfeatures.extractor.retain_best(keypoints, n)` keeps the `n` strongest
keypoints plus any tied with the weakest one kept.

## Building blocks

- `orbfeatures.keypoint`: the frozen `KeyPoint` record, with `shifted(dx, dy)`
  and `scaled(factor)` returning moved copies.
- `orbfeatures.pattern`: `orb_pattern()` returns the 512 sampling points of the
  descriptor as a `(512, 2)` array; points `2k` and `2k + 1` form one test.
- `orbfeatures.imaging`: `reflect101_border`, `resize_linear`, `gaussian_blur`
  and `fast` (FAST-9 corners with optional non-maximum suppression).
- `orbfeatures.octree`: `ExtractorNode` and `distribute_oct_tree`, which keeps
  the strongest keypoint of each quadtree cell until about `n` remain.
- `orbfeatures.descriptor`: `fast_atan2`, `compute_umax`, `ic_angle`,
  `compute_orientation`, `compute_orb_descriptor` and `compute_descriptors`.
- `orbfeatures.histogram`: rotation consistency.

## Rotation consistency

```python
from orbfeatures.histogram import RotationHistogram

histogram = RotationHistogram()          # 30 bins by default
for index, (angle1, angle2) in enumerate(match_angles):
    histogram.add(angle1, angle2, index)
rejected = histogram.inconsistent()
```

`add` records a match index under the bin of its rotation and returns the bin.
`inconsistent()` returns the indices that lie outside the three fullest bins;
the second and third bins only count as peaks when they hold at least a tenth
of the first. `compute_three_maxima` and `rotation_bin` are available on their
own.

## What it does not do

The package extracts and describes features and can judge rotation
consistency, but it does not match descriptors: there is no Hamming-distance
function, no nearest-neighbour ratio test and no matcher. Comparing
descriptors between images is left to the caller. There is no command-line
tool and nothing is read from or written to disk.