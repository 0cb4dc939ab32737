# SPDX-License-Identifier: Apache-2.0
"""Synthetic portrait generator for demos and tests."""
from __future__ import annotations

from typing import List, Tuple

import cv2
import numpy as np

from .face_mask import oval_landmarks
from .imaging import as_image_buffer

SKIN_RGB = (224, 172, 140)
BACKGROUND_RGB = (96, 110, 128)


def make_synthetic_face(width: int = 400, height: int = 400, seed: int = 7,
                        n_points: int = 128) -> Tuple[np.ndarray, List[Tuple[float, float]]]:
    """Return an RGBA portrait with an oval face and its contour landmarks.

    The face has top-to-bottom shading, flushed cheeks and a few darker
    spots so every pigment map has some structure.
    """
    rng = np.random.default_rng(seed)
    cx, cy = width / 2.0, height * 0.45
    rx, ry = width * 0.32, height * 0.40
    landmarks = oval_landmarks(cx, cy, rx, ry, n_points)

    img = np.empty((height, width, 3), dtype=np.float32)
    img[:] = BACKGROUND_RGB

    face = np.zeros((height, width), dtype=np.uint8)
    cv2.fillPoly(face, [np.round(np.array(landmarks)).astype(np.int32).reshape(-1, 1, 2)], 255)

    rows = np.linspace(1.03, 0.88, height, dtype=np.float32)[:, None, None]
    skin = np.array(SKIN_RGB, dtype=np.float32) * rows
    skin = np.broadcast_to(skin, img.shape).copy()

    flush = np.zeros((height, width), dtype=np.float32)
    for sx in (-0.45, 0.45):
        cv2.circle(flush, (int(cx + sx * rx), int(cy + 0.25 * ry)), max(2, int(0.18 * rx)), 1.0, -1)
    flush = cv2.GaussianBlur(flush, (0, 0), max(1.0, 0.08 * rx))
    skin[..., 0] += 18.0 * flush
    skin[..., 1] -= 22.0 * flush
    skin[..., 2] -= 14.0 * flush

    for _ in range(6):
        px = int(cx + rng.uniform(-0.5, 0.5) * rx)
        py = int(cy + rng.uniform(-0.5, 0.5) * ry)
        spot = np.zeros((height, width), dtype=np.float32)
        cv2.circle(spot, (px, py), max(1, int(0.03 * rx)), 1.0, -1)
        skin -= 45.0 * cv2.GaussianBlur(spot, (0, 0), 1.5)[..., None] * np.array([0.6, 0.8, 1.0], dtype=np.float32)

    skin += rng.normal(0.0, 2.0, skin.shape).astype(np.float32)
    inside = face > 0
    img[inside] = skin[inside]
    rgb = np.clip(np.round(img), 0, 255).astype(np.uint8)
    return as_image_buffer(rgb), landmarks
