from pinet.params import DecodeParams
from pinet.postprocess.errors import ShapeMismatch
from pinet.postprocess.grid_decoder import (FeatureGrid, Keypoint, positive_mask, positive_cells,
                                            reconstruct, in_bounds)
from pinet.postprocess.embedding import extract_embeddings, non_degenerate
from pinet.postprocess.cluster import LaneCluster, InstanceClusterer, cluster_keypoints
from pinet.postprocess.refine import refine, eliminate_fewer_points, sort_along_y, eliminate_out
from pinet.postprocess.assembler import to_lanes, split_xy


def extract_keypoints(grid, params):
    """Keypoints of one FeatureGrid in raster order.

    Cells below the threshold, with an out of bounds reconstruction or with a
    degenerate embedding are skipped silently.
    """
    mask = positive_mask(grid.confidence, grid.height, grid.width, params.thresh_point)
    rows, cols = positive_cells(mask)
    point_x, point_y = reconstruct(grid.offset, rows, cols, params.resize_ratio)
    features = extract_embeddings(grid.embedding, rows, cols)

    keep = in_bounds(point_x, point_y, grid.height, grid.width, params.resize_ratio, params.bounds)
    keep &= non_degenerate(features)

    keypoints = []
    for i in keep.nonzero()[0]:
        keypoints.append(Keypoint(int(point_x[i]), int(point_y[i]), int(rows[i]), int(cols[i]),
                                  features[i].astype('float64')))
    return keypoints


def generate_result(grid, params):
    """Raw lane clusters, before any refinement."""
    keypoints = extract_keypoints(grid, params)
    return cluster_keypoints(keypoints, params.threshold_instance, params.cluster_candidate_cap)


def decode(confidence, offset, embedding, params=None):
    """Lane point sequences for one inference result.

    Args:
        confidence: (1, H, W) array or tensor.
        offset: (2, H, W) array or tensor.
        embedding: (E, H, W) array or tensor, E >= 2.
        params: DecodeParams, defaults when None.

    Returns:
        list of lanes, each a list of (x, y) int tuples with non-decreasing y.
        An empty list means no lane was detected.

    Raises:
        ShapeMismatch: the three outputs do not describe the same grid.
    """
    if params is None:
        params = DecodeParams()
    grid = FeatureGrid(confidence, offset, embedding)
    clusters = generate_result(grid, params)
    clusters = refine(clusters, grid.confidence, params)
    return to_lanes(clusters)


def format_mask(mask):
    """0/1 rendering of a positive-cell mask, one grid row per line."""
    return '\n'.join(''.join('1' if v else '0' for v in row) for row in mask)


def format_confidence(confidence):
    """Raw confidence values, one grid row per line."""
    if confidence.ndim == 3:
        confidence = confidence[0]
    return '\n'.join(''.join('%7.4f' % v for v in row) for row in confidence)
