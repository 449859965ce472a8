"""Pinhole camera intrinsics read from a parameter table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

__all__ = ["CameraIntrinsics", "camera_from_parameters"]

_PARAMETER_FIELDS = ("fx", "fy", "cx", "cy", "d0", "d1", "d2", "d3", "d4", "scale")


@dataclass(frozen=True)
class CameraIntrinsics:
    """Focal lengths, principal point, distortion terms and depth scale."""

    fx: float
    fy: float
    cx: float
    cy: float
    d0: float = 0.0
    d1: float = 0.0
    d2: float = 0.0
    d3: float = 0.0
    d4: float = 0.0
    scale: float = 1.0

    def back_project(self, u, v, depth):
        """Return the 3-D point (x, y, z) seen at pixel (u, v) with a raw depth value.

        The raw depth is divided by ``scale`` to give metric depth.  Works on
        scalars and on numpy arrays alike.
        """
        z = depth / self.scale
        x = (u - self.cx) * z / self.fx
        y = (v - self.cy) * z / self.fy
        return x, y, z


def camera_from_parameters(params: Mapping[str, Any]) -> CameraIntrinsics:
    """Build camera intrinsics from ``camera.*`` entries of a parameter mapping.

    Every one of ``camera.fx``, ``camera.fy``, ``camera.cx``, ``camera.cy``,
    ``camera.d0`` .. ``camera.d4`` and ``camera.scale`` must be present.
    """
    values = {}
    for name in _PARAMETER_FIELDS:
        key = f"camera.{name}"
        try:
            raw = params[key]
        except KeyError:
            raise KeyError(f"Missing camera parameter: {key}") from None
        try:
            values[name] = float(raw)
        except (TypeError, ValueError):
            raise ValueError(f"Camera parameter {key} is not a number: {raw!r}") from None
    return CameraIntrinsics(**values)