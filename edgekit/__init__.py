"""Spatial-filter edge detection (Sobel, Scharr, LoG, Roberts Cross, Canny) on uint8 buffers."""

from edgekit.buffer import Buffer, load, merge_add, pad, threshold, to_grayscale, unpad, unpad_into, write
from edgekit.convolution import convolve, working_copy
from edgekit.directional import Direction, classify_direction, two_pass
from edgekit.errors import (
    ChannelError,
    DimensionError,
    EdgeDetectError,
    KernelError,
    PaddingError,
    ShapeMismatchError,
    ThresholdOrderError,
)
from edgekit.hysteresis import hysteresis_threshold
from edgekit.kernel import Kernel, create, gaussian
from edgekit.recipes import (
    edge_detect,
    edge_detect_canny,
    edge_detect_cross,
    edge_detect_log,
    edge_detect_scharr,
    edge_detect_sobel,
    filter_canny,
    filter_cross,
    filter_gaussian,
    filter_log,
    filter_scharr,
    filter_sobel,
    filter_threshold,
    gaussian_blur,
)

__version__ = "0.1.0"
