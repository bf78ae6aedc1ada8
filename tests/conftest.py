import numpy as np
import pytest

from lasso_select.candidates import CandidateEntry
from lasso_select.projection import CameraPose

SQUARE = [
    (-500.0, -500.0, -2000.0),
    (500.0, -500.0, -2000.0),
    (500.0, 500.0, -2000.0),
    (-500.0, 500.0, -2000.0),
]

# With a 90 degree square frustum, these cursors land on SQUARE at distance 2000.
SQUARE_CURSORS = [(-0.25, -0.25), (0.25, -0.25), (0.25, 0.25), (-0.25, 0.25)]


@pytest.fixture
def camera():
    return CameraPose(position=(0.0, 0.0, 0.0), fov=90.0, aspect=1.0)


@pytest.fixture
def square():
    return [np.array(p) for p in SQUARE]


@pytest.fixture
def apex():
    return np.zeros(3)


@pytest.fixture
def candidates():
    return [
        CandidateEntry("inside", (0.0, 0.0, -2000.0)),
        CandidateEntry("right", (1000.0, 1000.0, -2000.0)),
        CandidateEntry("behind", (0.0, 0.0, 2000.0)),
    ]
