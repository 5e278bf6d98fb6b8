import numpy as np
import pytest

from pinet.postprocess import Keypoint


@pytest.fixture
def make_outputs():
    """Build (confidence, offset, embedding) for a grid where only ``cells`` fire.

    ``cells`` maps (row, col) to (confidence, embedding) or
    (confidence, embedding, (dx, dy)).
    """
    def _make(height, width, cells, num_embedding=4):
        confidence = np.zeros((1, height, width), dtype=np.float64)
        offset = np.zeros((2, height, width), dtype=np.float64)
        embedding = np.zeros((num_embedding, height, width), dtype=np.float64)
        for (row, col), value in cells.items():
            confidence[0, row, col] = value[0]
            embedding[:2, row, col] = value[1]
            if len(value) > 2:
                offset[:, row, col] = value[2]
        return confidence, offset, embedding
    return _make


@pytest.fixture
def keypoint():
    def _make(embedding, x=0, y=0, row=0, col=0):
        return Keypoint(x, y, row, col, np.asarray(embedding, dtype=np.float64))
    return _make
