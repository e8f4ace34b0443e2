"""Exceptions raised by the edge detection filters."""


class EdgeDetectError(ValueError):
    """Base class for every filter/buffer failure."""


class ChannelError(EdgeDetectError):
    """Operation needs a different channel count (usually exactly one)."""


class DimensionError(EdgeDetectError):
    """Zero-sized or malformed buffer."""


class PaddingError(EdgeDetectError):
    """Padding amount is invalid or too small for a kernel's footprint."""


class ShapeMismatchError(EdgeDetectError):
    """Two buffers of a binary operation do not line up."""


class ThresholdOrderError(EdgeDetectError):
    """Hysteresis thresholds given with t1 <= t2."""


class KernelError(EdgeDetectError):
    """Kernel could not be built from the given parameters."""
