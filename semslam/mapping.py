"""Building coloured point clouds from depth, colour and semantic images."""

from __future__ import annotations

import numpy as np

from semslam.camera import CameraIntrinsics

__all__ = ["dilate", "moving_object_mask", "generate_point_cloud", "voxel_filter"]

# Semantic colours (b, g, r) of classes that may move.
_MOVING_CLASSES = (
    (0, 64, 64),     # pedestrian
    (192, 128, 0),   # bicyclist
)

# Semantic colours (b, g, r) of classes left out of the map.
_EXCLUDED_CLASSES = (
    (128, 128, 128),  # sky
    (128, 192, 192),  # pole
    (192, 128, 0),    # cyclist
)


def dilate(mask, size: int = 3, iterations: int = 1) -> np.ndarray:
    """Grey-level dilation of a 2-D image with a size x size square, repeated."""
    src = np.asarray(mask)
    if src.ndim != 2:
        raise ValueError("dilate expects a 2-D image")
    if size < 1:
        raise ValueError("Kernel size must be at least 1")
    if iterations < 0:
        raise ValueError("Iterations must not be negative")
    if src.dtype == np.bool_:
        fill = False
    elif np.issubdtype(src.dtype, np.integer):
        fill = np.iinfo(src.dtype).min
    else:
        fill = -np.inf
    anchor = size // 2
    pad = ((anchor, size - 1 - anchor), (anchor, size - 1 - anchor))
    height, width = src.shape
    out = src.copy()
    for _ in range(iterations):
        padded = np.pad(out, pad, mode="constant", constant_values=fill)
        result = padded[0:height, 0:width].copy()
        for dy in range(size):
            for dx in range(size):
                np.maximum(result, padded[dy:dy + height, dx:dx + width], out=result)
        out = result
    return out


def _colour_mask(image: np.ndarray, colours) -> np.ndarray:
    hit = np.zeros(image.shape[:2], dtype=bool)
    for colour in colours:
        hit |= np.all(image[:, :, :3] == np.asarray(colour, dtype=image.dtype), axis=2)
    return hit


def moving_object_mask(semantic) -> np.ndarray:
    """Mask (255 where set) of pixels labelled as possibly moving, dilated twice."""
    image = np.asarray(semantic)
    if image.ndim != 3 or image.shape[2] < 3:
        raise ValueError("Semantic image must be H x W x 3")
    mask = np.where(_colour_mask(image, _MOVING_CLASSES), 255, 0).astype(np.uint8)
    return dilate(mask, 3, 2)


def generate_point_cloud(
    depth,
    rgb,
    semantic,
    camera: CameraIntrinsics,
    transform=None,
    max_distance: float = float("inf"),
) -> np.ndarray:
    """Back-project a frame into an N x 6 array of (x, y, z, b, g, r) points.

    Pixels with zero depth, depth beyond ``max_distance`` metres, a possibly
    moving object, or a sky, pole or cyclist label are left out.  Points are
    in row-major pixel order and are moved by the 4 x 4 ``transform`` if given.
    """
    depth = np.asarray(depth)
    rgb = np.asarray(rgb)
    semantic = np.asarray(semantic)
    if depth.ndim != 2:
        raise ValueError("Depth image must be 2-D")
    if rgb.shape[:2] != depth.shape or semantic.shape[:2] != depth.shape:
        raise ValueError("Depth, colour and semantic images must have the same size")

    moving = moving_object_mask(semantic)
    keep = (depth != 0) & (depth <= max_distance * camera.scale) & (moving != 255)
    keep &= ~_colour_mask(semantic, _EXCLUDED_CLASSES)

    rows, cols = np.nonzero(keep)
    d = depth[rows, cols].astype(np.float64)
    x, y, z = camera.back_project(cols.astype(np.float64), rows.astype(np.float64), d)
    points = np.column_stack([x, y, z]) if len(rows) else np.zeros((0, 3))

    if transform is not None:
        matrix = np.asarray(transform, dtype=np.float64)
        if matrix.shape != (4, 4):
            raise ValueError("Transform must be a 4 x 4 matrix")
        points = points @ matrix[:3, :3].T + matrix[:3, 3]

    colours = rgb[rows, cols, :3].astype(np.float64)
    return np.hstack([points, colours.reshape(-1, 3)])


def voxel_filter(points, resolution: float) -> np.ndarray:
    """Replace the points inside each cubic voxel by their mean.

    Every column is averaged; the first three are taken as x, y, z.  Voxels
    come out ordered by z index, then y, then x.
    """
    pts = np.asarray(points, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[1] < 3:
        raise ValueError("Points must be an N x k array with k >= 3")
    if resolution <= 0:
        raise ValueError("Voxel resolution must be positive")
    if len(pts) == 0:
        return pts.copy()
    idx = np.floor(pts[:, :3] / resolution).astype(np.int64)
    idx -= idx.min(axis=0)
    order = np.lexsort((idx[:, 0], idx[:, 1], idx[:, 2]))
    sorted_idx = idx[order]
    change = np.any(np.diff(sorted_idx, axis=0) != 0, axis=1)
    starts = np.concatenate([[0], np.nonzero(change)[0] + 1])
    sums = np.add.reduceat(pts[order], starts, axis=0)
    counts = np.diff(np.append(starts, len(pts)))
    return sums / counts[:, None]