# SPDX-License-Identifier: Apache-2.0
"""Face mask construction from a landmark contour.

This module implements:
- Landmark validation (count, finiteness, area, simple-polygon check)
- Polygon rasterization into a (H, W) uint8 membership mask
- Capability interfaces for landmark providers and mask builders, with
  deterministic mock implementations for low-tier devices and tests
"""
from __future__ import annotations

from typing import Optional, Protocol, Tuple

import cv2
import numpy as np

from .config import CONFIG, Config
from .errors import InvalidLandmarks, NoFaceRegion, OutOfRange
from .logging_utils import get_logger
from .types import LandmarkSet

LOGGER = get_logger(__name__)


# ----------------------------- validation -----------------------------

def _as_points(landmarks: LandmarkSet) -> np.ndarray:
    try:
        pts = np.asarray(landmarks, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidLandmarks(f"landmarks are not numeric points: {e}") from e
    if pts.ndim != 2 or pts.shape[0] == 0 or pts.shape[1] < 2:
        raise InvalidLandmarks(f"expected a sequence of (x, y) points, got shape {pts.shape}")
    return pts[:, :2]


def _drop_repeats(pts: np.ndarray) -> np.ndarray:
    """Remove consecutive duplicates, including the closing point."""
    keep = np.any(pts != np.roll(pts, 1, axis=0), axis=1)
    if not keep.any():
        return pts[:1]
    return pts[keep]


def polygon_area(pts: np.ndarray) -> float:
    """Signed shoelace area."""
    x, y = pts[:, 0], pts[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def _cross(o: np.ndarray, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return (a[..., 0] - o[..., 0]) * (b[..., 1] - o[..., 1]) - (a[..., 1] - o[..., 1]) * (b[..., 0] - o[..., 0])


def is_self_intersecting(pts: np.ndarray, block: int = 64) -> bool:
    """True when two non-adjacent edges of the closed contour properly cross.

    Edges are tested ``block`` rows at a time against all edges, so memory
    stays linear in the contour length.
    """
    n = len(pts)
    if n < 4:
        return False
    a = pts
    b = np.roll(pts, -1, axis=0)
    A2, B2 = a[None, :, :], b[None, :, :]
    j = np.arange(n)[None, :]
    for start in range(0, n, block):
        stop = min(start + block, n)
        A1, B1 = a[start:stop, None, :], b[start:stop, None, :]
        d1 = _cross(A1, B1, A2)
        d2 = _cross(A1, B1, B2)
        d3 = _cross(A2, B2, A1)
        d4 = _cross(A2, B2, B1)
        crossing = (d1 * d2 < 0) & (d3 * d4 < 0)

        i = np.arange(start, stop)[:, None]
        # each pair once; skip neighbours, including the closing edge pair
        candidate = (j > i + 1) & ~((i == 0) & (j == n - 1))
        if (crossing & candidate).any():
            return True
    return False


def validate_landmarks(landmarks: LandmarkSet, config: Config = CONFIG) -> np.ndarray:
    """Return the cleaned (N, 2) contour or raise :class:`InvalidLandmarks`."""
    pts = _as_points(landmarks)
    if not np.isfinite(pts).all():
        raise InvalidLandmarks("landmarks contain non-finite coordinates")
    pts = _drop_repeats(pts)
    if len(pts) < config.mask.min_points:
        raise InvalidLandmarks(
            f"need at least {config.mask.min_points} distinct points, got {len(pts)}"
        )
    area = abs(polygon_area(pts))
    if area < config.mask.min_area_px:
        raise InvalidLandmarks(f"contour is degenerate (area {area:.2f}px)")
    if is_self_intersecting(pts):
        raise InvalidLandmarks("contour is self-intersecting")
    return pts


# ----------------------------- rasterization -----------------------------

def build_face_mask(
    landmarks: LandmarkSet,
    width: int,
    height: int,
    config: Config = CONFIG,
) -> np.ndarray:
    """Rasterize the closed landmark contour into a (height, width) mask.

    Pixels inside the contour are 255, outside 0. With ``mask.feather_px``
    above zero the edge is softened by a Gaussian of that sigma.

    Raises:
        InvalidLandmarks: insufficient, degenerate or self-intersecting points.
        OutOfRange: non-positive width or height.
    """
    if int(width) <= 0 or int(height) <= 0:
        raise OutOfRange(f"mask size must be positive, got {width}x{height}")
    try:
        pts = validate_landmarks(landmarks, config)
    except InvalidLandmarks as e:
        LOGGER.warning("invalid_landmarks", reason=str(e))
        raise

    mask = np.zeros((int(height), int(width)), dtype=np.uint8)
    poly = np.round(pts).astype(np.int32).reshape(-1, 1, 2)
    cv2.fillPoly(mask, [poly], 255)

    feather = config.mask.feather_px
    if feather > 0:
        soft = cv2.GaussianBlur(mask, (0, 0), float(feather))
        # interior stays fully covered; the blur only adds an outer fringe
        mask = np.where(mask == 255, mask, soft).astype(np.uint8)

    LOGGER.info("mask_built", width=int(width), height=int(height), coverage=round(mask_coverage(mask), 4))
    mask.flags.writeable = False
    return mask


def mask_coverage(mask: np.ndarray) -> float:
    """Fraction of pixels with any face membership."""
    if mask.size == 0:
        return 0.0
    return float(np.count_nonzero(mask)) / mask.size


def mask_bounds(mask: np.ndarray) -> Optional[Tuple[int, int, int, int]]:
    """(top, bottom, left, right) of covered pixels, inclusive; None if empty."""
    rows = np.flatnonzero(mask.any(axis=1))
    if rows.size == 0:
        return None
    cols = np.flatnonzero(mask.any(axis=0))
    return int(rows[0]), int(rows[-1]), int(cols[0]), int(cols[-1])


def require_face_region(image: np.ndarray, mask: np.ndarray) -> None:
    """Raise :class:`NoFaceRegion` unless ``mask`` fits ``image`` and covers something."""
    if mask.shape != image.shape[:2]:
        raise NoFaceRegion(f"mask shape {mask.shape} does not match image {image.shape[:2]}")
    if not np.any(mask):
        raise NoFaceRegion("face mask covers zero pixels")


def face_center(mask: np.ndarray) -> Tuple[float, float]:
    ys, xs = np.nonzero(mask)
    if len(xs) == 0:
        raise NoFaceRegion("face mask covers zero pixels")
    return float(xs.mean()), float(ys.mean())


# ----------------------------- capability interfaces -----------------------------

class LandmarkProvider(Protocol):
    """Supplies a face contour for an image or raises InvalidLandmarks."""

    def landmarks(self, image: np.ndarray) -> LandmarkSet:
        ...


class FaceMaskBuilder(Protocol):
    def build(self, landmarks: LandmarkSet, width: int, height: int) -> np.ndarray:
        ...


class StaticLandmarkProvider:
    """Wraps a landmark set produced elsewhere (e.g. a face-mesh service)."""

    def __init__(self, points: LandmarkSet):
        self.points = [tuple(p[:2]) for p in points]

    def landmarks(self, image: np.ndarray) -> LandmarkSet:
        return list(self.points)


class OvalLandmarkProvider:
    """Deterministic mock: an upright ellipse proportioned like a face."""

    def __init__(self, n_points: int = 128, width_ratio: float = 0.32, height_ratio: float = 0.40,
                 center_y_ratio: float = 0.45):
        self.n_points = n_points
        self.width_ratio = width_ratio
        self.height_ratio = height_ratio
        self.center_y_ratio = center_y_ratio

    def landmarks(self, image: np.ndarray) -> LandmarkSet:
        h, w = image.shape[:2]
        return oval_landmarks(
            w / 2.0, h * self.center_y_ratio, w * self.width_ratio, h * self.height_ratio, self.n_points
        )


class PolygonMaskBuilder:
    def __init__(self, config: Config = CONFIG):
        self.config = config

    def build(self, landmarks: LandmarkSet, width: int, height: int) -> np.ndarray:
        return build_face_mask(landmarks, width, height, self.config)


class EllipseMaskBuilder:
    """Mock builder: fits an ellipse to the landmark bounding box."""

    def __init__(self, config: Config = CONFIG):
        self.config = config

    def build(self, landmarks: LandmarkSet, width: int, height: int) -> np.ndarray:
        if int(width) <= 0 or int(height) <= 0:
            raise OutOfRange(f"mask size must be positive, got {width}x{height}")
        pts = validate_landmarks(landmarks, self.config)
        x0, y0 = pts.min(axis=0)
        x1, y1 = pts.max(axis=0)
        mask = np.zeros((int(height), int(width)), dtype=np.uint8)
        center = (int(round((x0 + x1) / 2)), int(round((y0 + y1) / 2)))
        axes = (int((x1 - x0) // 2), int((y1 - y0) // 2))
        cv2.ellipse(mask, center, axes, 0, 0, 360, 255, thickness=-1)
        mask.flags.writeable = False
        return mask


def oval_landmarks(cx: float, cy: float, rx: float, ry: float, n_points: int = 128):
    """Points on an ellipse, clockwise from the top of the forehead."""
    t = np.linspace(0.0, 2.0 * np.pi, n_points, endpoint=False)
    return [(float(cx + rx * np.sin(a)), float(cy - ry * np.cos(a))) for a in t]
