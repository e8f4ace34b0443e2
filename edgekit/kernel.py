"""Convolution kernels: explicit weight matrices and the Gaussian generator."""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from edgekit.errors import KernelError


@dataclass(frozen=True, eq=False)
class Kernel:
    """Immutable height x width weight matrix; the weighted sum is divided by ``divisor``."""
    values: np.ndarray
    divisor: float = 1.0

    @property
    def height(self) -> int:
        return int(self.values.shape[0])

    @property
    def width(self) -> int:
        return int(self.values.shape[1])

    @property
    def half_width(self) -> int:
        return self.width // 2

    @property
    def half_height(self) -> int:
        return self.height // 2

    @property
    def required_padding(self) -> int:
        """Border a buffer needs so every interior cell's footprint stays in bounds."""
        return max(self.half_width, self.half_height)


def create(height: int, width: int, divisor: float, values) -> Kernel:
    """Copy a height x width matrix of weights into a new Kernel."""
    if height < 1 or width < 1:
        raise KernelError(f"kernel dimensions must be >= 1, got {height}x{width}")
    if divisor == 0:
        raise KernelError("kernel divisor must not be 0")
    vals = np.array(values, dtype=np.float64)
    if vals.shape != (height, width):
        raise KernelError(f"expected {height}x{width} weights, got shape {vals.shape}")
    vals.setflags(write=False)
    return Kernel(vals, float(divisor))


def gaussian(size: int, weight: float) -> Kernel:
    """
    size x size Gaussian kernel:

        w(x, y) = 1 / (2*pi*weight^2) * exp(-(x^2 + y^2) / (2*weight^2))

    with x, y running from -size//2 to size//2. The formula already
    normalises the weights, so the divisor is 1 (the truncated weights sum to
    slightly less than 1 and the filter darkens a little, as expected).
    """
    if size < 3:
        raise KernelError(f"gaussian size must be >= 3, got {size}")
    if weight <= 0:
        raise KernelError(f"gaussian weight must be > 0, got {weight}")
    k = size // 2
    y, x = np.mgrid[-k:size - k, -k:size - k]
    s = 2.0 * weight * weight
    vals = np.exp(-(x**2 + y**2) / s) / (np.pi * s)
    return create(size, size, 1.0, vals)


# --------------------------- named kernels ---------------------------

SOBEL_X = [[1, 0, -1],
           [2, 0, -2],
           [1, 0, -1]]
SOBEL_Y = [[ 1,  2,  1],
           [ 0,  0,  0],
           [-1, -2, -1]]

SCHARR_X = [[ 47, 0,  -47],
            [162, 0, -162],
            [ 47, 0,  -47]]
SCHARR_Y = [[ 47,  162,  47],
            [  0,    0,   0],
            [-47, -162, -47]]

CROSS_X = [[1,  0],
           [0, -1]]
CROSS_Y = [[ 0, 1],
           [-1, 0]]

LAPLACIAN = [[ 0, -1,  0],
             [-1,  4, -1],
             [ 0, -1,  0]]


def sobel_kernels() -> Tuple[Kernel, Kernel]:
    return create(3, 3, 4.0, SOBEL_X), create(3, 3, 4.0, SOBEL_Y)


def scharr_kernels() -> Tuple[Kernel, Kernel]:
    return create(3, 3, 80.0, SCHARR_X), create(3, 3, 80.0, SCHARR_Y)


def cross_kernels() -> Tuple[Kernel, Kernel]:
    """Roberts Cross pair (2x2, anchored at the bottom-right cell)."""
    return create(2, 2, 1.0, CROSS_X), create(2, 2, 1.0, CROSS_Y)


def laplacian_kernel() -> Kernel:
    return create(3, 3, 1.0, LAPLACIAN)
