from dataclasses import dataclass, fields

BOUNDS_POLICIES = ('grid', 'image')


@dataclass(frozen=True)
class DecodeParams:
    """Constants shared with the upstream model plus the refinement knobs.

    ``thresh_point``, ``threshold_instance``, ``resize_ratio`` and
    ``cluster_candidate_cap`` must match what the network was trained with.
    """
    thresh_point: float = 0.81
    threshold_instance: float = 0.22
    resize_ratio: int = 8
    min_cluster_size: int = 3
    cluster_candidate_cap: int = 12
    eliminate_outliers: bool = True
    outlier_conf_ratio: float = 0.5
    # 'grid' keeps the bounds check against the feature map extents
    bounds: str = 'grid'

    def __post_init__(self):
        if self.resize_ratio <= 0:
            raise ValueError('resize_ratio must be positive, got %r' % self.resize_ratio)
        if self.cluster_candidate_cap <= 0:
            raise ValueError('cluster_candidate_cap must be positive, got %r' % self.cluster_candidate_cap)
        if self.threshold_instance < 0:
            raise ValueError('threshold_instance must be non-negative, got %r' % self.threshold_instance)
        if self.min_cluster_size < 0:
            raise ValueError('min_cluster_size must be non-negative, got %r' % self.min_cluster_size)
        if not 0 <= self.outlier_conf_ratio <= 1:
            raise ValueError('outlier_conf_ratio must be in [0, 1], got %r' % self.outlier_conf_ratio)
        if self.bounds not in BOUNDS_POLICIES:
            raise ValueError('bounds must be one of %s, got %r' % (BOUNDS_POLICIES, self.bounds))

    @classmethod
    def from_config(cls, cfg):
        """Pick the decode items out of a loaded config, ignoring everything else."""
        kwargs = {}
        for f in fields(cls):
            if f.name in cfg and cfg[f.name] is not None:
                kwargs[f.name] = cfg[f.name]
        return cls(**kwargs)
