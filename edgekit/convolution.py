"""
Convolution engine.

Kernels are applied as a weighted sum over the neighbourhood centred on the
kernel's middle cell (index ``size // 2``), i.e. a correlation: the kernel is
not flipped. Results are divided by the kernel divisor, rounded half up
and clamped to a byte. Only interior cells are written; the border
keeps whatever the padding put there.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

import cv2
import numpy as np

from edgekit.buffer import Buffer, pad, unpad_into
from edgekit.errors import EdgeDetectError, PaddingError
from edgekit.kernel import Kernel

logger = logging.getLogger(__name__)


def to_byte(values: np.ndarray) -> np.ndarray:
    """Round half up and clamp into uint8."""
    return np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)


def convolve(buffer: Buffer, kernel: Kernel) -> Buffer:
    """
    Convolve ``buffer`` in place with ``kernel``.

    The buffer must be single-channel and padded by at least
    ``kernel.required_padding``; both are checked before anything is written.
    Every output cell is computed from the pre-convolution data, so no cell
    ever sees an already filtered neighbour.
    """
    buffer.require_single_channel("convolution")
    if buffer.padding < kernel.required_padding:
        raise PaddingError(
            f"convolution with a {kernel.width}x{kernel.height} kernel needs padding "
            f">= {kernel.required_padding}, buffer has {buffer.padding}"
        )
    p = buffer.padding
    if buffer.interior.size == 0:
        return buffer

    # filter2D writes a fresh array, the source is never read after a write
    src = buffer.data.astype(np.float64)
    summed = cv2.filter2D(src, cv2.CV_64F, kernel.values.copy(),
                          anchor=(kernel.half_width, kernel.half_height))
    cell = summed[p:buffer.height - p, p:buffer.width - p] / kernel.divisor
    buffer.interior[...] = to_byte(cell)
    return buffer


@contextmanager
def working_copy(buffer: Buffer, required_padding: int) -> Iterator[Buffer]:
    """
    Yield a private copy of ``buffer`` with at least ``required_padding`` of border.

    An under-padded buffer gets a copy padded by ``required_padding``,
    otherwise a plain clone is used. When the block finishes the result is
    restored into ``buffer`` via ``unpad_into``; if it raises, ``buffer`` is
    left exactly as it was.
    """
    if buffer.padding < required_padding:
        work = pad(buffer, required_padding)
    else:
        work = buffer.clone()
    try:
        yield work
    except EdgeDetectError as exc:
        logger.warning("Filter aborted, buffer left unchanged: %s", exc)
        raise
    unpad_into(buffer, work)
