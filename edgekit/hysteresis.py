"""
Hysteresis (dual) thresholding.

Cells at or above ``t1`` are strong edges, cells at or above ``t2`` are weak
candidates. A weak interior cell becomes strong when one of its 8 neighbours
is strong, and the sweep is repeated until nothing changes. The result keeps
every weak cell that is 8-connected to a strong cell through other weak
cells and drops the rest.

Cost: each sweep is O(area) and promotes at least one cell, so the loop
runs at most (number of weak interior cells + 1) times. For compact regions
that is about the interior diameter; a serpentine weak path can push it
towards O(area) sweeps, so the worst case is O(area^2). There is no
iteration cap, the loop always terminates because promotions only go one
way.
"""

import logging
from typing import Tuple

import cv2
import numpy as np

from edgekit.buffer import Buffer
from edgekit.convolution import working_copy
from edgekit.errors import PaddingError, ThresholdOrderError

logger = logging.getLogger(__name__)

# 3x3 structuring element: a cell plus its Moore neighbourhood
MOORE = np.ones((3, 3), dtype=np.uint8)


def hysteresis_masks(data: np.ndarray, t1: int, t2: int, padding: int) -> Tuple[np.ndarray, int, int]:
    """
    Run the promotion loop on a 2-D uint8 array.

    Only cells inside the ``padding`` border are promoted; border cells still
    count as strong neighbours when they clear ``t1``.

    Returns (strong mask, promoted cell count, number of sweeps).
    """
    if padding < 1:
        raise PaddingError("hysteresis needs at least 1 pixel of padding")
    if t1 <= t2:
        raise ThresholdOrderError(f"t1 must be greater than t2, got t1={t1}, t2={t2}")

    strong = data >= t1
    weak = data >= t2

    h, w = data.shape
    candidates = np.zeros_like(weak)
    candidates[padding:h - padding, padding:w - padding] = weak[padding:h - padding, padding:w - padding]

    promoted_total = 0
    sweeps = 0
    while True:
        sweeps += 1
        near_strong = cv2.dilate(strong.astype(np.uint8), MOORE,
                                 borderType=cv2.BORDER_CONSTANT, borderValue=0) > 0
        promoted = candidates & near_strong & ~strong
        changed = int(promoted.sum())
        if not changed:
            break
        strong |= promoted
        promoted_total += changed
    return strong, promoted_total, sweeps


def hysteresis_threshold(buffer: Buffer, t1: int, t2: int) -> Buffer:
    """
    Binarise ``buffer`` in place to 0/255 with hysteresis.

    ``t1`` is the strict (high) threshold and must be greater than ``t2``.
    An unpadded buffer is handled on a copy padded by one pixel so that
    8-neighbour lookups at the image edge stay in bounds.
    """
    if t1 <= t2:
        raise ThresholdOrderError(f"t1 must be greater than t2, got t1={t1}, t2={t2}")
    buffer.require_single_channel("hysteresis threshold")
    buffer.require_nonempty("hysteresis threshold")

    with working_copy(buffer, 1) as work:
        logger.info("Starting hysteresis threshold...")
        strong, promoted, sweeps = hysteresis_masks(work.data, t1, t2, work.padding)
        work.data[...] = np.where(strong, 255, 0).astype(np.uint8)
        logger.info("Recovered %d pixels in %d sweeps.", promoted, sweeps)
    return buffer
