# SPDX-License-Identifier: Apache-2.0
"""Image buffer helpers and scoped offscreen surfaces."""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
from PIL import Image

from .logging_utils import get_logger
from .utils.io import ensure_dir

LOGGER = get_logger(__name__)

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float32)


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.flags.writeable = False
    return arr


def as_image_buffer(image: Union[np.ndarray, Image.Image]) -> np.ndarray:
    """Return an immutable (H, W, 4) uint8 RGBA copy of ``image``."""
    if isinstance(image, Image.Image):
        return _readonly(np.array(image.convert("RGBA")))

    arr = np.asarray(image)
    if arr.dtype != np.uint8:
        raise ValueError(f"Expected uint8 image, got {arr.dtype}")
    if arr.ndim == 2:
        arr = np.stack([arr, arr, arr], axis=-1)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ValueError(f"Expected image [H,W,3|4], got shape {arr.shape}")
    if arr.shape[2] == 3:
        alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
        arr = np.concatenate([arr, alpha], axis=-1)
    else:
        arr = arr.copy()
    return _readonly(arr)


def load_image(path: Path) -> np.ndarray:
    with Image.open(path) as im:
        return as_image_buffer(im)


def save_image(buffer: np.ndarray, path: Path) -> Path:
    ensure_dir(path.parent)
    Image.fromarray(np.array(buffer, dtype=np.uint8)).save(path)
    return path


def luminance(rgba: np.ndarray) -> np.ndarray:
    """Per-pixel BT.601 luma in 0..255 as float32."""
    return rgba[..., :3].astype(np.float32) @ LUMA_WEIGHTS


class RasterSurface:
    """Offscreen RGBA surface owned by exactly one render call.

    Use as a context manager; the pixel store is dropped on exit whatever
    the exit path.
    """

    def __init__(self, shape: Tuple[int, int], tag: str = "surface"):
        self.shape = shape
        self.tag = tag
        self.pixels: Optional[np.ndarray] = np.zeros(shape + (4,), dtype=np.uint8)

    @classmethod
    def like(cls, image: np.ndarray, tag: str = "surface") -> "RasterSurface":
        return cls(image.shape[:2], tag)

    @property
    def released(self) -> bool:
        return self.pixels is None

    def load(self, image: np.ndarray) -> np.ndarray:
        if self.pixels is None:
            raise RuntimeError(f"{self.tag} already released")
        np.copyto(self.pixels, image)
        return self.pixels

    def snapshot(self) -> np.ndarray:
        if self.pixels is None:
            raise RuntimeError(f"{self.tag} already released")
        return _readonly(self.pixels.copy())

    def release(self) -> None:
        if self.pixels is not None:
            self.pixels = None
            LOGGER.debug("surface_released", tag=self.tag)

    def __enter__(self) -> "RasterSurface":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
