# SPDX-License-Identifier: Apache-2.0
"""Exceptions raised by the drape and pigment engine.

Every failure is an input-validation failure; nothing here is retried.
"""
from __future__ import annotations


class DrapeLabError(Exception):
    """Base class for all engine errors."""


class InvalidLandmarks(DrapeLabError, ValueError):
    """Landmark set is too small, non-finite, degenerate or self-intersecting."""


class NoFaceRegion(DrapeLabError):
    """Face mask covers no pixels or does not match the image."""


class OutOfRange(DrapeLabError, ValueError):
    """A parameter is outside its accepted domain."""


class CancelledAnalysis(DrapeLabError):
    """A palette ranking was cancelled before every swatch was scored."""

    def __init__(self, completed: int, total: int):
        super().__init__(f"palette ranking cancelled after {completed}/{total} swatches")
        self.completed = completed
        self.total = total
