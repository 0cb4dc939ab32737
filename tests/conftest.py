from __future__ import annotations

import numpy as np
import pytest

from drapelab.face_mask import build_face_mask
from drapelab.samples import make_synthetic_face

SIZE = 160


@pytest.fixture(scope="session")
def synthetic_face():
    return make_synthetic_face(SIZE, SIZE)


@pytest.fixture(scope="session")
def face_image(synthetic_face) -> np.ndarray:
    return synthetic_face[0]


@pytest.fixture(scope="session")
def face_landmarks(synthetic_face):
    return synthetic_face[1]


@pytest.fixture(scope="session")
def face_mask(face_landmarks) -> np.ndarray:
    return build_face_mask(face_landmarks, SIZE, SIZE)


@pytest.fixture(scope="session")
def pigment_analysis(face_image, face_mask):
    from drapelab.pigments import decompose_pigments

    return decompose_pigments(face_image, face_mask)
