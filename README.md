# semslam

Building blocks for a semantic stereo SLAM pipeline, written on top of NumPy.

The package works on data you already hold in memory: keypoint positions,
descriptor arrays, depth, colour and semantic images. It provides the pieces
that sit between those inputs and a map.

## Modules

### `semslam.matrix`

A small dense `Matrix` type of floats, stored row by row.

- Construction: `Matrix(rows, cols, values)` (values optional, row-major),
  `Matrix.identity(size)`, `Matrix.diag(vector)`, the rotations
  `Matrix.rot_x`, `Matrix.rot_y`, `Matrix.rot_z` (angles in radians) and
  `Matrix.cross(a, b)` for 3x1 column vectors.
- Access: `m[i, j]`, `shape`, `get_data`, `get_mat`, `set_mat`, `set_val`,
  `set_diag`, `zero`, `set_identity`, `extract_cols`, `reshape`.
- Arithmetic: `+`, `-`, `*` (matrix or scalar), `/` (scalar, or element-wise
  by a matrix, a column vector or a row vector; division by a zero entry
  leaves zero), unary `-`, `transpose`, `l2norm`, `mean`.
- Linear algebra: `solve(a, eps)` (Gauss–Jordan, replaces the matrix with the
  solution of `a * X = self`), `inverse`, in-place `invert`, `lu`, `det` and
  `svd`, which returns `U`, the singular values `W` as a column sorted in
  decreasing order, and `V`.
- `pythag(a, b)` computes `sqrt(a**2 + b**2)` without overflow.

Wrong shapes, out-of-range blocks and singular systems raise `MatrixError`
(a `ValueError`); division by a scalar near zero raises `ZeroDivisionError`.
`det` returns `0.0` for a matrix with an all-zero row.

### `semslam.quadmatch`

Matching features across the four images of two stereo pairs: left and right
at the current time (`lc`, `rc`) and at the previous time (`lp`, `rp`).

- `descriptor_distance(vec1, vec2, binary)` – L2 distance for floating-point
  descriptors, Hamming distance for `uint8` binary ones.
- `match_in_window(...)` – for every feature of the first set, the nearest
  descriptor among features of the second set within a search window;
  returns `(train_index, distance)` pairs, with index `-1` when the best
  distance exceeds the threshold.
- `circular_match(...)` – chains matches lc → rc → rp → lp and returns the
  consistent loops as `QuadMatch` records.
- `filter_tracks(...)` – keeps optical-flow tracks that stay inside a
  1280 × 960 region and agree geometrically around the circle.
- `within_region(pt, region)`, the `DetectorType` and `DescriptorType`
  enums, and `descriptor_settings(descriptor_type)`, which returns the
  `DescriptorSettings` (distance threshold and binary flag) for a descriptor.

### `semslam.camera`

- `CameraIntrinsics` – focal lengths, principal point, distortion terms and
  depth scale; `back_project(u, v, depth)` turns a pixel and raw depth into
  `(x, y, z)`, for scalars or NumPy arrays.
- `camera_from_parameters(params)` – builds intrinsics from the
  `camera.fx`, `camera.fy`, `camera.cx`, `camera.cy`, `camera.d0` …
  `camera.d4` and `camera.scale` entries of a mapping.

### `semslam.matching`

- `FeatureMatch` – query index, train index and distance.
- `ratio_test(knn_matches, ratio)` – keeps the best candidate of each list
  when it beats the runner-up by the given ratio.
- `possible_loops(frame, frames, score, min_sim_score, min_interval)` – loop
  closure candidates by similarity score and id distance.
- `correspondences(matches, positions, keypoints)` – 3-D/2-D point pairs for
  pose estimation, skipping features without a 3-D position.

### `semslam.mapping`

- `dilate(mask, size, iterations)` – grey-level dilation with a square kernel.
- `moving_object_mask(semantic)` – marks pedestrian and bicyclist pixels
  (BGR colours) with 255, dilated twice.
- `generate_point_cloud(depth, rgb, semantic, camera, transform, max_distance)`
  – an N × 6 array of `(x, y, z, b, g, r)`, skipping zero or distant depth,
  moving objects and sky, pole and cyclist labels, optionally moved by a
  4 × 4 transform.
- `voxel_filter(points, resolution)` – replaces the points in each voxel by
  their mean.

## What the package does not do

It does not read images or datasets from disk, detect keypoints, compute
descriptors, run optical flow, estimate or optimise camera poses, run a
pose graph, display anything or write point-cloud files. Those steps must
be supplied by the caller; this package works on their results.

## Installation

```
pip install .
pip install ".[test]"   # with the test tools
```

## Example

```python
import numpy as np
from semslam.matrix import Matrix
from semslam.camera import camera_from_parameters
from semslam.mapping import generate_point_cloud, voxel_filter

a = Matrix(2, 2, [4.0, 7.0, 2.0, 6.0])
print(a.det())        # 10.0
print(a.inverse())

params = {
    "camera.fx": 500.0, "camera.fy": 500.0,
    "camera.cx": 320.0, "camera.cy": 240.0,
    "camera.d0": 0.0, "camera.d1": 0.0, "camera.d2": 0.0,
    "camera.d3": 0.0, "camera.d4": 0.0,
    "camera.scale": 1000.0,
}
camera = camera_from_parameters(params)

depth = np.full((480, 640), 2000, dtype=np.uint16)
rgb = np.zeros((480, 640, 3), dtype=np.uint8)
semantic = np.zeros((480, 640, 3), dtype=np.uint8)
cloud = generate_point_cloud(depth, rgb, semantic, camera, np.eye(4), 10.0)
print(len(voxel_filter(cloud, 0.05)))
```

## Tests

```
pytest
```