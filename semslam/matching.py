"""Feature match filtering, loop candidate search and PnP correspondences."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Sequence, Tuple, TypeVar

__all__ = ["FeatureMatch", "ratio_test", "possible_loops", "correspondences"]

Frame = TypeVar("Frame")
Point2 = Tuple[float, float]
Point3 = Tuple[float, float, float]


@dataclass(frozen=True)
class FeatureMatch:
    """A match from a query descriptor to a train descriptor."""

    query_idx: int
    train_idx: int
    distance: float


def ratio_test(
    knn_matches: Iterable[Sequence[FeatureMatch]], ratio: float
) -> list[FeatureMatch]:
    """Keep the best match of each k-nearest list when it beats the second by ``ratio``.

    A best match is kept when its distance is less than ``ratio`` times the
    distance of the runner-up.  Lists with fewer than two candidates cannot be
    tested and are dropped.
    """
    kept = []
    for candidates in knn_matches:
        if len(candidates) < 2:
            continue
        best, second = candidates[0], candidates[1]
        if best.distance < ratio * second.distance:
            kept.append(best)
    return kept


def possible_loops(
    frame: Frame,
    frames: Iterable[Frame],
    score: Callable[[Frame, Frame], float],
    min_sim_score: float,
    min_interval: int,
) -> list[Frame]:
    """Return the frames similar to ``frame`` and far enough from it in sequence.

    ``score`` rates the appearance similarity of two frames; frames must have
    an integer ``id``.  A frame qualifies when its score exceeds
    ``min_sim_score`` and its id differs by more than ``min_interval``.
    """
    return [
        other
        for other in frames
        if score(frame, other) > min_sim_score and abs(other.id - frame.id) > min_interval
    ]


def correspondences(
    matches: Iterable[FeatureMatch],
    positions: Sequence[Point3],
    keypoints: Sequence[Point2],
) -> tuple[list[Point3], list[Point2], list[FeatureMatch]]:
    """Pair the 3-D positions of query features with the 2-D keypoints they matched.

    Matches whose query feature has no 3-D position (the origin) are skipped.
    Returns the object points, the image points and the matches used, in the
    same order.
    """
    object_points: list[Point3] = []
    image_points: list[Point2] = []
    used: list[FeatureMatch] = []
    for match in matches:
        position = tuple(float(c) for c in positions[match.query_idx])
        if position == (0.0, 0.0, 0.0):
            continue
        object_points.append(position)  # type: ignore[arg-type]
        image_points.append(tuple(float(c) for c in keypoints[match.train_idx]))  # type: ignore[arg-type]
        used.append(match)
    return object_points, image_points, used