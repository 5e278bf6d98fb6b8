import numpy as np
import pytest

from pinet import DecodeParams, decode
from pinet.postprocess import (cluster_keypoints, eliminate_fewer_points, sort_along_y, eliminate_out,
                               refine, to_lanes, split_xy)
from pinet.postprocess.refine import lookup_confidence, outlier_threshold


def _cluster(keypoint, coords, embedding=(1.0, 1.0)):
    clusters = cluster_keypoints([keypoint(embedding, x=x, y=y) for x, y in coords])
    assert len(clusters) == 1
    return clusters[0]


def test_size_filter_drops_small_clusters(keypoint):
    small = _cluster(keypoint, [(0, 0), (0, 8)])
    large = _cluster(keypoint, [(8, 0), (8, 8), (8, 16)], embedding=(5.0, 5.0))

    assert eliminate_fewer_points([small, large], 3) == [large]
    assert eliminate_fewer_points([small, large], 1) == [small, large]
    assert eliminate_fewer_points([small, large], 4) == []


def test_single_point_clusters_survive_only_with_min_size_one(keypoint):
    clusters = cluster_keypoints([keypoint([0.0, 0.0], x=40, y=80, row=10, col=5),
                                  keypoint([5.0, 5.0], x=160, y=80, row=10, col=20)])
    confidence = np.full((1, 64, 32), 0.9)

    kept = refine(clusters, confidence, DecodeParams(min_cluster_size=1, bounds='image'))
    dropped = refine(clusters, confidence, DecodeParams(min_cluster_size=2, bounds='image'))

    assert to_lanes(kept) == [[(40, 80)], [(160, 80)]]
    assert to_lanes(dropped) == []


def test_sort_along_y_is_stable(keypoint):
    cluster = _cluster(keypoint, [(3, 16), (1, 8), (2, 16), (0, 0), (4, 8)])

    sorted_cluster, = sort_along_y([cluster])

    assert [(p.x, p.y) for p in sorted_cluster.points] == [(0, 0), (1, 8), (4, 8), (3, 16), (2, 16)]
    assert [(p.x, p.y) for p in cluster.points] == [(3, 16), (1, 8), (2, 16), (0, 0), (4, 8)]


def test_lookup_confidence_inverse_maps_pixels(keypoint):
    confidence = np.arange(16, dtype=np.float64).reshape(1, 4, 4)
    points = [keypoint([1, 1], x=9, y=17), keypoint([1, 1], x=100, y=0)]

    conf = lookup_confidence(confidence, points, resize_ratio=8)

    # (17 // 8, 9 // 8) = (2, 1); x = 100 is clipped to the last column
    assert conf.tolist() == [9.0, 3.0]


def test_eliminate_out_removes_low_confidence_points(keypoint):
    confidence = np.full((1, 8, 8), 0.9)
    confidence[0, 2, 0] = 0.2
    cluster = _cluster(keypoint, [(0, 0), (0, 8), (0, 16), (0, 24)])

    refined, = eliminate_out([cluster], confidence, resize_ratio=8, outlier_conf_ratio=0.5)

    assert [(p.x, p.y) for p in refined.points] == [(0, 0), (0, 8), (0, 24)]
    # clustering statistics are not rewritten
    assert refined.count == 4
    assert len(cluster.points) == 4


def test_refine_applies_size_filter_after_outlier_pass(keypoint):
    confidence = np.full((1, 8, 8), 0.9)
    confidence[0, 1, 0] = 0.1
    cluster = _cluster(keypoint, [(0, 0), (0, 8), (0, 16)])

    assert refine([cluster], confidence, DecodeParams(min_cluster_size=3)) == []


def test_refine_without_outlier_pass_keeps_points(keypoint):
    confidence = np.full((1, 8, 8), 0.9)
    confidence[0, 1, 0] = 0.1
    cluster = _cluster(keypoint, [(0, 16), (0, 8), (0, 0)])

    refined = refine([cluster], confidence, DecodeParams(min_cluster_size=3, eliminate_outliers=False))

    assert to_lanes(refined) == [[(0, 0), (0, 8), (0, 16)]]


def test_split_xy():
    xs, ys = split_xy([[(1, 2), (3, 4)], [(5, 6)]])

    assert xs == [[1, 3], [5]]
    assert ys == [[2, 4], [6]]


def test_uniform_negative_confidence_keeps_the_whole_lane(keypoint):
    confidence = np.full((1, 8, 8), -0.2)
    cluster = _cluster(keypoint, [(0, 0), (0, 8), (0, 16), (0, 24)])

    refined = refine([cluster], confidence, DecodeParams(min_cluster_size=3))

    assert to_lanes(refined) == [[(0, 0), (0, 8), (0, 16), (0, 24)]]


def test_low_point_among_negative_confidences_is_removed(keypoint):
    confidence = np.full((1, 8, 8), -0.2)
    confidence[0, 1, 0] = -1.0
    cluster = _cluster(keypoint, [(0, 0), (0, 8), (0, 16), (0, 24)])

    refined, = eliminate_out([cluster], confidence, resize_ratio=8, outlier_conf_ratio=0.5)

    # median -0.2, threshold -0.3
    assert [(p.x, p.y) for p in refined.points] == [(0, 0), (0, 16), (0, 24)]


@pytest.mark.parametrize('conf, expected', [
    ([0.9, 0.9, 0.9], 0.45),
    ([-0.2, -0.2, -0.2], -0.3),
    ([0.0, 0.0, 0.0], 0.0),
])
def test_outlier_threshold_stays_at_or_below_median(conf, expected):
    threshold = outlier_threshold(np.array(conf), 0.5)

    assert threshold == pytest.approx(expected)
    assert threshold <= np.median(conf)


def test_lane_shifted_onto_negative_neighbour_cells_survives_decode(make_outputs):
    # every point lands on column 1 after its offset, so the outlier pass reads
    # column 1's confidence instead of the firing cells in column 0
    cells = {(row, 0): (0.95, [1.0, 1.0], (1.0, 0.0)) for row in range(6)}
    expected = [[(8, 0), (8, 8), (8, 16), (8, 24), (8, 32), (8, 40)]]
    for neighbour in (0.2, 0.0, -0.2):
        confidence, offset, embedding = make_outputs(64, 32, cells)
        confidence[0, :, 1] = neighbour

        assert decode(confidence, offset, embedding) == expected


def test_refine_leaves_input_clusters_untouched(keypoint):
    cluster = _cluster(keypoint, [(0, 16), (0, 8), (0, 0)])
    confidence = np.full((1, 8, 8), 0.9)

    kept = refine([cluster], confidence, DecodeParams(min_cluster_size=1))
    dropped = refine([cluster], confidence, DecodeParams(min_cluster_size=4))

    assert to_lanes(kept) == [[(0, 0), (0, 8), (0, 16)]]
    assert dropped == []
    assert [(p.x, p.y) for p in cluster.points] == [(0, 16), (0, 8), (0, 0)]
