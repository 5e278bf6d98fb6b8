import numpy as np

from pinet.postprocess.errors import ShapeMismatch

EMBEDDING_DIM = 2
DEGENERATE_EPS = 1e-6


def extract_embeddings(embedding, rows, cols):
    """First two embedding channels sampled at each (row, col), shape (N, 2)."""
    if embedding.ndim != 3 or embedding.shape[0] < EMBEDDING_DIM:
        raise ShapeMismatch('embedding must be (E, H, W) with E >= %d, got shape %s'
                            % (EMBEDDING_DIM, embedding.shape))
    return np.stack([embedding[k, rows, cols] for k in range(EMBEDDING_DIM)], axis=-1)


def non_degenerate(features, eps=DEGENERATE_EPS):
    """False where both components are within ``eps`` of zero."""
    return ~np.all(np.abs(features) < eps, axis=-1)
