"""Circular feature matching across a stereo pair at two time steps.

The four images are the left and right views at the current time (``lc``,
``rc``) and at the previous time (``lp``, ``rp``).  A quad match links one
feature in each of them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

__all__ = [
    "DetectorType",
    "DescriptorType",
    "QuadMatch",
    "DescriptorSettings",
    "descriptor_settings",
    "descriptor_distance",
    "match_in_window",
    "within_region",
    "filter_tracks",
    "circular_match",
]

Point = Tuple[float, float]

# Distance given to a feature that found no candidate inside its search window.
_NO_CANDIDATE_DISTANCE = 999999999.9

# Limits used when filtering optical-flow tracks.
_TRACK_REGION = (1280, 960)
_MIN_HEIGHT_DIF = 20
_MIN_HEIGHT_DIF_TIME = 30
_MIN_WIDTH_DIF = 200
_MIN_TRACK_DISPARITY = 3

# Limits used when chaining descriptor matches around the quad.
_MIN_QUAD_DISPARITY = 3
_MAX_QUAD_DELTA_X = 2


class DetectorType(enum.Enum):
    """Kinds of keypoint detector the matcher can be configured with."""

    FAST = enum.auto()
    FAST_ADAPT = enum.auto()
    FAST_GRID = enum.auto()
    STAR = enum.auto()
    STAR_ADAPT = enum.auto()
    STAR_GRID = enum.auto()
    ORB = enum.auto()
    SURF = enum.auto()
    SIFT = enum.auto()
    GFTT = enum.auto()
    GFTT_GRID = enum.auto()


class DescriptorType(enum.Enum):
    """Kinds of keypoint descriptor the matcher can be configured with."""

    SIFT = enum.auto()
    SURF = enum.auto()
    BRISK = enum.auto()
    FREAK = enum.auto()
    ORB = enum.auto()


@dataclass(frozen=True)
class DescriptorSettings:
    """Match acceptance threshold and norm for a descriptor type."""

    distance_threshold: float
    binary: bool


_SETTINGS = {
    DescriptorType.SIFT: DescriptorSettings(8000.0, False),
    DescriptorType.SURF: DescriptorSettings(0.3, False),
    DescriptorType.BRISK: DescriptorSettings(120.0, True),
    DescriptorType.FREAK: DescriptorSettings(100.0, True),
    DescriptorType.ORB: DescriptorSettings(80.0, True),
}


@dataclass
class QuadMatch:
    """One feature seen in all four images: coordinates and feature indices."""

    u1c: float = 0.0
    v1c: float = 0.0
    i1c: int = 0
    u2c: float = 0.0
    v2c: float = 0.0
    i2c: int = 0
    u1p: float = 0.0
    v1p: float = 0.0
    i1p: int = 0
    u2p: float = 0.0
    v2p: float = 0.0
    i2p: int = 0


def descriptor_settings(descriptor_type: DescriptorType) -> DescriptorSettings:
    """Return the distance threshold and norm used for a descriptor type."""
    try:
        return _SETTINGS[DescriptorType(descriptor_type)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown descriptor type: {descriptor_type!r}") from None


def descriptor_distance(vec1, vec2, binary: bool) -> float:
    """Distance between two descriptor vectors.

    Float descriptors use the L2 norm; binary (uint8) descriptors use the
    Hamming distance.
    """
    a = np.asarray(vec1)
    b = np.asarray(vec2)
    if a.ndim != 1 or b.ndim != 1 or a.shape != b.shape or a.dtype != b.dtype:
        raise ValueError("Descriptors must be 1-D vectors of the same length and type")
    if binary:
        if a.dtype != np.uint8:
            raise ValueError("Binary descriptors must be of type uint8")
        return float(np.unpackbits(np.bitwise_xor(a, b)).sum())
    if not np.issubdtype(a.dtype, np.floating):
        raise ValueError("Non-binary descriptors must be floating point")
    diff = a.astype(np.float64) - b.astype(np.float64)
    return float(np.sqrt(np.dot(diff, diff)))


def match_in_window(
    keypoints1: Sequence[Point],
    descriptors1,
    keypoints2: Sequence[Point],
    descriptors2,
    search_width: float,
    search_height: float,
    distance_threshold: float,
    binary: bool,
) -> list[tuple[int, float]]:
    """Match every feature of the first set to its nearest descriptor in a window.

    Returns one ``(train_index, distance)`` pair per feature of the first set,
    in order.  Only features of the second set whose position differs by less
    than ``search_width`` horizontally and ``search_height`` vertically are
    candidates.  The train index is -1 when the best distance exceeds the
    threshold or no candidate exists.
    """
    desc1 = np.asarray(descriptors1)
    desc2 = np.asarray(descriptors2)
    matches: list[tuple[int, float]] = []
    for i, (x1, y1) in enumerate(keypoints1):
        best_id = 0
        best_distance = _NO_CANDIDATE_DISTANCE
        for j, (x2, y2) in enumerate(keypoints2):
            if abs(x2 - x1) < search_width and abs(y2 - y1) < search_height:
                distance = descriptor_distance(desc1[i], desc2[j], binary)
                if distance < best_distance:
                    best_distance = distance
                    best_id = j
        if best_distance > distance_threshold:
            best_id = -1
        matches.append((best_id, best_distance))
    return matches


def within_region(pt: Point, region: tuple[float, float]) -> bool:
    """True if the point lies strictly inside a (width, height) region."""
    x, y = pt
    width, height = region
    return 0.0 < x < width and 0.0 < y < height


def filter_tracks(
    point_lc: Sequence[Point],
    point_rc: Sequence[Point],
    point_lp: Sequence[Point],
    point_rp: Sequence[Point],
    point_lp_direct: Sequence[Point],
) -> list[QuadMatch]:
    """Keep the circularly tracked points that are geometrically consistent.

    ``point_lp_direct`` is the left-previous position tracked directly from
    the left-current image; it must agree with the position reached around
    the circle.
    """
    sizes = {len(point_lc), len(point_rc), len(point_lp), len(point_rp), len(point_lp_direct)}
    if len(sizes) != 1:
        raise ValueError("The sizes of the input point lists are not equal")

    result: list[QuadMatch] = []
    tracks = zip(point_lc, point_rc, point_lp, point_rp, point_lp_direct)
    for i, (lc, rc, lp, rp, lp_direct) in enumerate(tracks):
        if not all(within_region(p, _TRACK_REGION) for p in (lc, lp, rc, rp)):
            continue
        dif_height1 = round(abs(lc[1] - rc[1]))
        dif_height2 = round(abs(lp[1] - rp[1]))
        dif_height11 = round(abs(lc[1] - lp[1]))
        dif_height22 = round(abs(rc[1] - rp[1]))
        dif_width1 = round(abs(lc[0] - lp[0]))
        dif_width2 = round(abs(rc[0] - rp[0]))
        disparity1 = round(abs(lc[0] - rc[0]))
        disparity2 = round(abs(lp[0] - rp[0]))
        dif_x = round(abs(lp[0] - lp_direct[0]))
        dif_y = round(abs(lp[1] - lp_direct[1]))
        if (
            dif_height1 < _MIN_HEIGHT_DIF
            and dif_height2 < _MIN_HEIGHT_DIF
            and dif_height11 < _MIN_HEIGHT_DIF_TIME
            and dif_height22 < _MIN_HEIGHT_DIF_TIME
            and dif_width1 < _MIN_WIDTH_DIF
            and dif_width2 < _MIN_WIDTH_DIF
            and disparity1 > _MIN_TRACK_DISPARITY
            and disparity2 > _MIN_TRACK_DISPARITY
            and dif_x < 1
            and dif_y < 1
        ):
            result.append(
                QuadMatch(
                    u1c=float(lc[0]), v1c=float(lc[1]), i1c=i,
                    u2c=float(rc[0]), v2c=float(rc[1]), i2c=i,
                    u1p=float(lp[0]), v1p=float(lp[1]), i1p=i,
                    u2p=float(rp[0]), v2p=float(rp[1]), i2p=i,
                )
            )
    return result


def circular_match(
    keypoints_lc: Sequence[Point],
    descriptors_lc,
    keypoints_rc: Sequence[Point],
    descriptors_rc,
    keypoints_rp: Sequence[Point],
    descriptors_rp,
    keypoints_lp: Sequence[Point],
    descriptors_lp,
    distance_threshold: float,
    binary: bool,
) -> list[QuadMatch]:
    """Chain descriptor matches lc -> rc -> rp -> lp and keep consistent loops.

    A chain is followed only through positive feature indices.  It is kept
    when the horizontal motion in both views agrees to within two pixels and
    the current disparity exceeds three pixels.
    """
    if not (keypoints_lc and keypoints_rc and keypoints_rp and keypoints_lp):
        return []

    matches_lrc = match_in_window(
        keypoints_lc, descriptors_lc, keypoints_rc, descriptors_rc, 20, 2,
        distance_threshold, binary,
    )
    matches_rcp = match_in_window(
        keypoints_rc, descriptors_rc, keypoints_rp, descriptors_rp, 20, 20,
        distance_threshold, binary,
    )
    matches_rlp = match_in_window(
        keypoints_rp, descriptors_rp, keypoints_lp, descriptors_lp, 20, 2,
        distance_threshold, binary,
    )

    result: list[QuadMatch] = []
    for id_lc, (id_rc, _) in enumerate(matches_lrc):
        if id_rc <= 0:
            continue
        id_rp = matches_rcp[id_rc][0]
        if id_rp <= 0:
            continue
        id_lp = matches_rlp[id_rp][0]
        if id_lp <= 0:
            continue
        u1c, v1c = keypoints_lc[id_lc]
        u2c, v2c = keypoints_rc[id_rc]
        u2p, v2p = keypoints_rp[id_rp]
        u1p, v1p = keypoints_lp[id_lp]
        delta_x = int(abs(abs(u1c - u1p) - abs(u2c - u2p)))
        disparity = int(abs(u1c - u2c))
        if delta_x < _MAX_QUAD_DELTA_X and disparity > _MIN_QUAD_DISPARITY:
            result.append(
                QuadMatch(
                    u1c=float(u1c), v1c=float(v1c), i1c=id_lc,
                    u2c=float(u2c), v2c=float(v2c), i2c=id_rc,
                    u1p=float(u1p), v1p=float(v1p), i1p=id_lp,
                    u2p=float(u2p), v2p=float(v2p), i2p=id_rp,
                )
            )
    return result