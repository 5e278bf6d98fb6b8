import copy

import numpy as np


def with_points(cluster, points):
    """Shallow copy of ``cluster`` holding ``points``; the input cluster is left alone."""
    refined = copy.copy(cluster)
    refined.points = list(points)
    return refined


def eliminate_fewer_points(clusters, min_cluster_size=3):
    return [cluster for cluster in clusters if len(cluster) >= min_cluster_size]


def sort_along_y(clusters):
    # sorted() is stable, so points sharing a y keep their insertion order
    return [with_points(cluster, sorted(cluster.points, key=lambda p: p.y)) for cluster in clusters]


def lookup_confidence(confidence, points, resize_ratio=8):
    """Confidence of the grid cell each pixel coordinate maps back to."""
    if confidence.ndim == 3:
        confidence = confidence[0]
    height, width = confidence.shape
    if len(points) == 0:
        return np.zeros(0, dtype=confidence.dtype)
    xs = np.array([p.x for p in points])
    ys = np.array([p.y for p in points])
    rows = np.clip(ys // resize_ratio, 0, height - 1)
    cols = np.clip(xs // resize_ratio, 0, width - 1)
    return confidence[rows, cols]


def outlier_threshold(conf, outlier_conf_ratio=0.5):
    """Lowest confidence a point may have and stay in its cluster.

    ``median - (1 - ratio) * |median|``: a fraction of the median for positive
    medians, and still below the median when raw confidences are negative.
    """
    median = float(np.median(conf))
    return median - (1.0 - outlier_conf_ratio) * abs(median)


def eliminate_out(clusters, confidence, resize_ratio=8, outlier_conf_ratio=0.5):
    """Drop points whose confidence falls well below their cluster's median.

    The cluster's running mean and count are left as clustering produced them;
    only the point list shrinks.
    """
    refined = []
    for cluster in clusters:
        conf = lookup_confidence(confidence, cluster.points, resize_ratio)
        if len(conf) == 0:
            refined.append(with_points(cluster, cluster.points))
            continue
        keep = conf >= outlier_threshold(conf, outlier_conf_ratio)
        refined.append(with_points(cluster, [p for p, k in zip(cluster.points, keep) if k]))
    return refined


def refine(clusters, confidence, params):
    """Size filter, vertical sort and outlier pass; returns new cluster objects."""
    clusters = eliminate_fewer_points(clusters, params.min_cluster_size)
    clusters = sort_along_y(clusters)
    if params.eliminate_outliers:
        clusters = eliminate_out(clusters, confidence, params.resize_ratio, params.outlier_conf_ratio)
        clusters = sort_along_y(clusters)
        clusters = eliminate_fewer_points(clusters, params.min_cluster_size)
    return clusters
