"""
Named filter recipes built from the convolution / two-pass / hysteresis stages.

Every recipe checks the buffer (one channel, non-zero size) before doing
anything and runs its stages on a private working copy, so on failure the
caller's buffer is untouched and the exception propagates.

    Sobel     3x3 Sobel pair, divisor 4, two-pass (optionally thinned)
    Scharr    3x3 Scharr pair, divisor 80, two-pass (optionally thinned)
    Cross     2x2 Roberts Cross pair, divisor 1, two-pass
    LoG       gaussian(5, sigma) then 3x3 Laplacian
    Gaussian  gaussian(size, weight)
    Canny     gaussian(5, sigma) -> Sobel with thinning -> hysteresis(t1, t2)
"""

import logging
from typing import Callable, Dict

from edgekit import config
from edgekit.buffer import Buffer, threshold
from edgekit.convolution import convolve, working_copy
from edgekit.directional import two_pass
from edgekit.errors import KernelError, ThresholdOrderError
from edgekit.hysteresis import hysteresis_threshold
from edgekit.kernel import cross_kernels, gaussian, laplacian_kernel, scharr_kernels, sobel_kernels

logger = logging.getLogger(__name__)


def _check(buffer: Buffer, op: str) -> None:
    buffer.require_single_channel(op)
    buffer.require_nonempty(op)


# ------------------------------ filters ------------------------------

def filter_sobel(buffer: Buffer, thinned: bool = False) -> Buffer:
    _check(buffer, "Sobel")
    kx, ky = sobel_kernels()
    return two_pass(buffer, kx, ky, thinned)


def filter_scharr(buffer: Buffer, thinned: bool = False) -> Buffer:
    _check(buffer, "Scharr")
    kx, ky = scharr_kernels()
    return two_pass(buffer, kx, ky, thinned)


def filter_cross(buffer: Buffer) -> Buffer:
    _check(buffer, "Roberts Cross")
    kx, ky = cross_kernels()
    return two_pass(buffer, kx, ky, False)


def filter_log(buffer: Buffer, sigma: float = config.LOG_SIGMA) -> Buffer:
    """Gaussian denoise followed by a Laplacian, both on the same padded copy."""
    _check(buffer, "LoG")
    gauss_k = gaussian(config.LOG_GAUSS_SIZE, sigma)
    lap_k = laplacian_kernel()
    required = max(gauss_k.required_padding, lap_k.required_padding)
    with working_copy(buffer, required) as work:
        convolve(work, gauss_k)
        convolve(work, lap_k)
    return buffer


def filter_gaussian(buffer: Buffer, size: int = config.BLUR_SIZE,
                    weight: float = config.BLUR_WEIGHT) -> Buffer:
    _check(buffer, "Gaussian blur")
    k = gaussian(size, weight)
    with working_copy(buffer, k.required_padding) as work:
        convolve(work, k)
    return buffer


def filter_threshold(buffer: Buffer, value: int) -> Buffer:
    return threshold(buffer, value)


def filter_canny(buffer: Buffer, sigma: float = config.CANNY_SIGMA,
                 t1: int = config.CANNY_T1, t2: int = config.CANNY_T2) -> Buffer:
    """blur -> Sobel with non-maximum suppression -> hysteresis threshold."""
    _check(buffer, "Canny")
    if sigma <= 0:
        raise KernelError(f"Canny blur sigma must be > 0, got {sigma}")
    if t1 <= t2:
        raise ThresholdOrderError(f"t1 must be greater than t2, got t1={t1}, t2={t2}")

    gauss_k = gaussian(config.CANNY_GAUSS_SIZE, sigma)
    with working_copy(buffer, gauss_k.required_padding) as work:
        convolve(work, gauss_k)
        filter_sobel(work, thinned=True)
        hysteresis_threshold(work, t1, t2)
    return buffer


# ---------------------------- orchestrator ---------------------------

def _post_threshold(buffer: Buffer, thresh: int) -> Buffer:
    if thresh:
        logger.info("Applying threshold of %d...", thresh)
        filter_threshold(buffer, thresh)
    return buffer


def edge_detect(buffer: Buffer) -> Buffer:
    """Default operation: Canny with the stock parameters."""
    return edge_detect_canny(buffer, config.CANNY_SIGMA, config.CANNY_T1, config.CANNY_T2)


def edge_detect_sobel(buffer: Buffer, thresh: int = 0) -> Buffer:
    logger.info("Applying Sobel filter...")
    filter_sobel(buffer, thinned=False)
    return _post_threshold(buffer, thresh)


def edge_detect_log(buffer: Buffer, thresh: int = 0) -> Buffer:
    logger.info("Applying LoG filter...")
    filter_log(buffer, config.LOG_SIGMA)
    return _post_threshold(buffer, thresh)


def edge_detect_scharr(buffer: Buffer, thresh: int = 0) -> Buffer:
    logger.info("Applying Scharr filter...")
    filter_scharr(buffer, thinned=False)
    return _post_threshold(buffer, thresh)


def edge_detect_cross(buffer: Buffer, thresh: int = 0) -> Buffer:
    logger.info("Applying Roberts Cross filter...")
    filter_cross(buffer)
    return _post_threshold(buffer, thresh)


def gaussian_blur(buffer: Buffer, weight: float = config.BLUR_WEIGHT) -> Buffer:
    logger.info("Applying gaussian blur (weight %.2f)...", weight)
    return filter_gaussian(buffer, config.BLUR_SIZE, weight)


def edge_detect_canny(buffer: Buffer, sigma: float = config.CANNY_SIGMA,
                      t1: int = config.CANNY_T1, t2: int = config.CANNY_T2) -> Buffer:
    logger.info("Applying Canny edge detection (sigma=%.2f, t1=%d, t2=%d)", sigma, t1, t2)
    return filter_canny(buffer, sigma, t1, t2)


# Operations that take an optional post-threshold
THRESHOLD_OPERATIONS: Dict[str, Callable[[Buffer, int], Buffer]] = {
    "sobel": edge_detect_sobel,
    "log": edge_detect_log,
    "scharr": edge_detect_scharr,
    "cross": edge_detect_cross,
}
