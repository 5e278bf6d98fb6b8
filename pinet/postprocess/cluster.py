import numpy as np


class LaneCluster(object):
    """Keypoints assigned to one lane and the running mean of their embeddings."""

    def __init__(self, keypoint):
        self.points = [keypoint]
        self.mean = np.asarray(keypoint.embedding, dtype=np.float64).copy()
        self.count = 1

    def distance(self, embedding):
        """Squared euclidean distance between ``embedding`` and the running mean."""
        diff = np.asarray(embedding, dtype=np.float64) - self.mean
        return float(np.sum(diff ** 2))

    def add(self, keypoint):
        embedding = np.asarray(keypoint.embedding, dtype=np.float64)
        self.mean = (self.mean * self.count + embedding) / (self.count + 1)
        self.points.append(keypoint)
        self.count += 1

    def __len__(self):
        return len(self.points)

    def __repr__(self):
        return 'LaneCluster(count=%d, mean=%s)' % (self.count, np.array2string(self.mean, precision=4))


class InstanceClusterer(object):
    """Greedy single pass grouping of keypoints by embedding similarity.

    Keypoints must be fed in raster order. Each one joins the first of the
    earliest ``candidate_cap`` clusters whose running mean lies within
    ``threshold_instance`` (squared distance, inclusive), otherwise it starts a
    new cluster. The result depends on the feed order by construction.
    """

    def __init__(self, threshold_instance=0.22, candidate_cap=12):
        self.threshold_instance = threshold_instance
        self.candidate_cap = candidate_cap
        self.clusters = []

    def candidates(self):
        cap = min(len(self.clusters), self.candidate_cap)
        return self.clusters[:cap]

    def match(self, keypoint):
        """Index of the first candidate cluster accepting ``keypoint``, or None."""
        for idx, cluster in enumerate(self.candidates()):
            if cluster.distance(keypoint.embedding) <= self.threshold_instance:
                return idx
        return None

    def add(self, keypoint):
        idx = self.match(keypoint)
        if idx is None:
            self.clusters.append(LaneCluster(keypoint))
            return len(self.clusters) - 1
        self.clusters[idx].add(keypoint)
        return idx

    def fit(self, keypoints):
        for keypoint in keypoints:
            self.add(keypoint)
        return self.clusters


def cluster_keypoints(keypoints, threshold_instance=0.22, candidate_cap=12):
    return InstanceClusterer(threshold_instance, candidate_cap).fit(keypoints)
