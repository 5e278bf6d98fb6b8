def to_lanes(clusters):
    """Refined clusters as lists of (x, y) pixel tuples, ready to draw as polylines."""
    return [[(int(p.x), int(p.y)) for p in cluster.points] for cluster in clusters]


def split_xy(lanes):
    """Per lane x list and y list."""
    xs = [[x for x, _ in lane] for lane in lanes]
    ys = [[y for _, y in lane] for lane in lanes]
    return xs, ys
