"""
Two-pass directional filtering and non-maximum suppression.

A two-pass filter convolves two copies of the image, one with an x kernel
and one with a y kernel, and adds the clamped responses into a magnitude
image. With thinning enabled, each cell's edge orientation is estimated from
the two responses and cells that are not a local maximum across the edge
are zeroed.

Orientation is quantised into four 45 degree buckets, named after the
orientation of the *edge*:

    HORIZONTAL         compare with the cells above / below
    DIAGONAL_FORWARD   compare with the anti-diagonal  (up-right / down-left)
    VERTICAL           compare with the cells left / right
    DIAGONAL_BACKWARD  compare with the main diagonal  (up-left / down-right)

The bucket of a cell is found from atan2(x_response, y_response): a strong
x response (vertical edge) gives an angle near pi/2, a strong y response
(horizontal edge) an angle near 0.
"""

import logging
import math
from enum import IntEnum
from typing import Dict, List, Tuple

import numpy as np

from edgekit.buffer import Buffer, merge_add
from edgekit.convolution import convolve, working_copy
from edgekit.errors import PaddingError
from edgekit.kernel import Kernel

logger = logging.getLogger(__name__)

Offset = Tuple[int, int]  # (dy, dx)


class Direction(IntEnum):
    HORIZONTAL = 0
    DIAGONAL_FORWARD = 1
    VERTICAL = 2
    DIAGONAL_BACKWARD = 3

    @property
    def neighbours(self) -> Tuple[Offset, Offset]:
        """The two cells lying across an edge of this orientation."""
        return NEIGHBOURS[self]


NEIGHBOURS: Dict[Direction, Tuple[Offset, Offset]] = {
    Direction.HORIZONTAL: ((-1, 0), (1, 0)),
    Direction.DIAGONAL_FORWARD: ((-1, 1), (1, -1)),
    Direction.VERTICAL: ((0, -1), (0, 1)),
    Direction.DIAGONAL_BACKWARD: ((-1, -1), (1, 1)),
}

UNCLASSIFIED = -1

_P8 = math.pi / 8

# Half-open (lo, hi] intervals of atan2 output
ANGLE_BUCKETS: List[Tuple[Direction, float, float]] = [
    (Direction.HORIZONTAL, -_P8, _P8),
    (Direction.HORIZONTAL, 7 * _P8, math.pi),
    (Direction.HORIZONTAL, -math.pi, -7 * _P8),
    (Direction.DIAGONAL_FORWARD, _P8, 3 * _P8),
    (Direction.DIAGONAL_FORWARD, -3 * _P8, -_P8),
    (Direction.VERTICAL, 3 * _P8, 5 * _P8),
    (Direction.VERTICAL, -5 * _P8, -3 * _P8),
    (Direction.DIAGONAL_BACKWARD, 5 * _P8, 7 * _P8),
    (Direction.DIAGONAL_BACKWARD, -7 * _P8, -5 * _P8),
]


def classify_direction(angle: float) -> Direction:
    """Bucket a single atan2 angle; angles outside (-pi, pi] are rejected."""
    for direction, lo, hi in ANGLE_BUCKETS:
        if lo < angle <= hi:
            return direction
    raise ValueError(f"angle {angle!r} is outside (-pi, pi]")


def classify_directions(angles: np.ndarray) -> np.ndarray:
    """Vectorised classify_direction; unmatched cells are UNCLASSIFIED."""
    out = np.full(angles.shape, UNCLASSIFIED, dtype=np.int8)
    for direction, lo, hi in ANGLE_BUCKETS:
        out[(angles > lo) & (angles <= hi)] = direction
    return out


def gradient_angles(first: np.ndarray, second: np.ndarray) -> np.ndarray:
    """atan2(first, second), first being the x-kernel response and second the y-kernel one."""
    return np.arctan2(first.astype(np.float64), second.astype(np.float64))


def suppress_non_maxima(magnitude: np.ndarray, directions: np.ndarray, padding: int) -> np.ndarray:
    """
    Zero every interior cell that is smaller than either neighbour across its edge.

    Cells are visited in raster order and zeroed in place, so a cell is
    compared with the already suppressed values above and to its left and
    with the untouched values below and to its right. Cells outside the
    ``padding`` border are copied through unchanged.
    """
    if padding < 1:
        raise PaddingError("non-maximum suppression needs at least 1 pixel of padding")
    out = magnitude.copy()
    h, w = magnitude.shape
    p = padding
    zeroed = 0
    for y in range(p, h - p):
        row = out[y, p:w - p]
        dirs = directions[y, p:w - p]
        left = out[y, p - 1:w - p - 1].copy()
        suppress = np.zeros(row.shape, dtype=bool)
        for direction in Direction:
            (ay, ax), (by, bx) = direction.neighbours
            selected = dirs == direction
            b = out[y + by, p + bx:w - p + bx]
            if direction is Direction.VERTICAL:
                # left neighbour depends on this row's own scan, see below
                suppress |= selected & (row < b)
            else:
                a = out[y + ay, p + ax:w - p + ax]
                suppress |= selected & ((row < a) | (row < b))

        # a left neighbour only matters while it survives, so decide those cells in order
        chained = (dirs == Direction.VERTICAL) & ~suppress & (row < left)
        row[suppress] = 0
        for x in np.flatnonzero(chained):
            if row[x] < out[y, p + x - 1]:
                row[x] = 0
                suppress[x] = True
        zeroed += int(suppress.sum())
    logger.debug("Non-maximum suppression zeroed %d cells", zeroed)
    return out


def two_pass(buffer: Buffer, kernel_x: Kernel, kernel_y: Kernel, thinning: bool = False) -> Buffer:
    """
    Apply ``kernel_x`` and ``kernel_y`` separately and merge by saturating add.

    Works on a padded private copy, so an under-padded buffer is fine; the
    result is written back into ``buffer`` in place.
    """
    buffer.require_single_channel("two-pass filter")
    buffer.require_nonempty("two-pass filter")

    required = max(kernel_x.required_padding, kernel_y.required_padding)
    if thinning:
        required = max(required, 1)

    with working_copy(buffer, required) as work:
        pass_x = convolve(work.clone(), kernel_x)
        pass_y = convolve(work.clone(), kernel_y)

        if thinning:
            directions = classify_directions(gradient_angles(pass_x.data, pass_y.data))

        merged = merge_add(pass_x, pass_y).data
        if thinning:
            merged = suppress_non_maxima(merged, directions, work.padding)
        work.data[...] = merged
    return buffer
