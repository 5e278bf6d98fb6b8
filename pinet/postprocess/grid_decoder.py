from collections import namedtuple

import numpy as np

from pinet.postprocess.errors import ShapeMismatch
from pinet.utils.common import converter

# x, y: pixel coordinates in the upsampled image; row, col: source grid cell
Keypoint = namedtuple('Keypoint', ['x', 'y', 'row', 'col', 'embedding'])


class FeatureGrid(object):
    """Read-only view over the confidence, offset and embedding outputs of one image.

    confidence: (1, H, W), offset: (2, H, W), embedding: (E, H, W) with E >= 2.
    Channel 0 of the offset is the x (column) displacement, channel 1 the y (row) one.
    """

    def __init__(self, confidence, offset, embedding):
        # views, so freezing them leaves the caller's arrays writable
        confidence = converter(confidence).view()
        offset = converter(offset).view()
        embedding = converter(embedding).view()
        for name, arr in (('confidence', confidence), ('offset', offset), ('embedding', embedding)):
            if arr.ndim != 3:
                raise ShapeMismatch('%s must be channel-first 3-d (C, H, W), got shape %s' % (name, arr.shape))
        if confidence.shape[0] != 1:
            raise ShapeMismatch('confidence must have 1 channel, got %d' % confidence.shape[0])
        if offset.shape[0] != 2:
            raise ShapeMismatch('offset must have 2 channels, got %d' % offset.shape[0])
        if embedding.shape[0] < 2:
            raise ShapeMismatch('embedding must have at least 2 channels, got %d' % embedding.shape[0])
        height, width = confidence.shape[1:]
        if offset.shape[1:] != (height, width) or embedding.shape[1:] != (height, width):
            raise ShapeMismatch('spatial size disagrees: confidence %s, offset %s, embedding %s'
                                % (confidence.shape, offset.shape, embedding.shape))

        for arr in (confidence, offset, embedding):
            arr.setflags(write=False)
        self.confidence = confidence
        self.offset = offset
        self.embedding = embedding
        self.height = height
        self.width = width

    @property
    def shape(self):
        return self.height, self.width


def positive_mask(confidence, height, width, thresh_point=0.81):
    """Cells whose confidence is strictly above ``thresh_point``.

    ``confidence`` may be (H, W) or (1, H, W).
    """
    confidence = converter(confidence)
    if confidence.ndim == 3 and confidence.shape[0] == 1:
        confidence = confidence[0]
    if confidence.shape != (height, width):
        raise ShapeMismatch('confidence has shape %s, expected (%d, %d)' % (confidence.shape, height, width))
    return confidence > thresh_point


def positive_cells(mask):
    """(rows, cols) of the positive cells in raster order, row outer and column inner."""
    # np.nonzero walks a C-contiguous array in row-major order
    return np.nonzero(mask)


def reconstruct(offset, rows, cols, resize_ratio=8):
    """Pixel coordinates of the given cells after applying their sub-cell offsets."""
    dx = offset[0, rows, cols]
    dy = offset[1, rows, cols]
    point_x = np.rint((dx + cols) * resize_ratio).astype(np.int64)
    point_y = np.rint((dy + rows) * resize_ratio).astype(np.int64)
    return point_x, point_y


def in_bounds(point_x, point_y, height, width, resize_ratio=8, bounds='grid'):
    if bounds == 'grid':
        limit_x, limit_y = width, height
    elif bounds == 'image':
        limit_x, limit_y = width * resize_ratio, height * resize_ratio
    else:
        raise NotImplementedError(bounds)
    return (point_x >= 0) & (point_x < limit_x) & (point_y >= 0) & (point_y < limit_y)
