"""
Pixel buffers and the padding manager.

A Buffer is a rectangular uint8 grid (one or more interleaved channels) that
carries an explicit, symmetric border width. The declared width/height
include that border; the "interior" is what is left once it is removed.

Padding is always black (0). It exists so that convolution and 8-neighbour
lookups can read past the edge of the real image without bounds checks.
"""

from pathlib import Path
from typing import Union

import cv2
import numpy as np

from edgekit.errors import ChannelError, DimensionError, PaddingError, ShapeMismatchError

PathLike = Union[str, Path]


class Buffer:
    """uint8 pixel grid with a symmetric zero border of ``padding`` pixels."""

    def __init__(self, data: np.ndarray, padding: int = 0, copy: bool = True):
        arr = np.asarray(data)
        if arr.dtype != np.uint8:
            raise TypeError(f"Buffer data must be uint8, got {arr.dtype} (use Buffer.from_array)")
        if arr.ndim == 3 and arr.shape[2] == 1:
            arr = arr[:, :, 0]
        if arr.ndim not in (2, 3):
            raise DimensionError(f"Buffer data must be 2-D or 3-D, got shape {arr.shape}")
        if arr.ndim == 3 and arr.shape[2] == 0:
            raise DimensionError("Buffer must have at least one channel")
        padding = int(padding)
        if padding < 0:
            raise PaddingError(f"padding must be >= 0, got {padding}")
        if 2 * padding > min(arr.shape[0], arr.shape[1]):
            raise PaddingError(
                f"padding {padding} does not fit a {arr.shape[1]}x{arr.shape[0]} buffer"
            )
        self.data = np.array(arr, copy=True) if copy else arr
        self.padding = padding

    @classmethod
    def from_array(cls, array, padding: int = 0) -> "Buffer":
        """Build a buffer from any numeric array, rounding and clipping to 0..255."""
        arr = np.asarray(array)
        if arr.dtype != np.uint8:
            arr = np.clip(np.floor(arr.astype(np.float64) + 0.5), 0, 255).astype(np.uint8)
        return cls(arr, padding)

    # ------------------------------ shape ------------------------------

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def channels(self) -> int:
        return 1 if self.data.ndim == 2 else int(self.data.shape[2])

    @property
    def interior_width(self) -> int:
        return self.width - 2 * self.padding

    @property
    def interior_height(self) -> int:
        return self.height - 2 * self.padding

    @property
    def interior(self) -> np.ndarray:
        """View of the cells inside the padding border."""
        p = self.padding
        return self.data[p:self.height - p, p:self.width - p]

    # ---------------------------- validation ---------------------------

    def require_single_channel(self, op: str) -> None:
        if self.channels != 1:
            raise ChannelError(f"{op} needs a single-channel buffer, got {self.channels} channels")

    def require_nonempty(self, op: str) -> None:
        if not self.width or not self.height:
            raise DimensionError(f"{op} needs a non-empty buffer, got {self.width}x{self.height}")

    # ------------------------------------------------------------------

    def clone(self) -> "Buffer":
        return Buffer(self.data, self.padding)

    def __repr__(self):
        return (f"Buffer(width={self.width}, height={self.height}, "
                f"channels={self.channels}, padding={self.padding})")


# ------------------------------ padding ------------------------------

def pad(buffer: Buffer, amount: int) -> Buffer:
    """Return a new buffer with ``amount`` black pixels added on every side."""
    buffer.require_single_channel("pad")
    buffer.require_nonempty("pad")
    if amount <= 0:
        raise PaddingError(f"pad amount must be > 0, got {amount}")
    data = cv2.copyMakeBorder(buffer.data, amount, amount, amount, amount,
                              borderType=cv2.BORDER_CONSTANT, value=0)
    return Buffer(data, buffer.padding + amount, copy=False)


def unpad(buffer: Buffer, amount: int) -> Buffer:
    """Return a new buffer with ``amount`` pixels of border cropped from each side."""
    buffer.require_single_channel("unpad")
    if amount <= 0 or amount > buffer.padding:
        raise PaddingError(
            f"unpad amount must be in 1..{buffer.padding}, got {amount}"
        )
    data = buffer.data[amount:buffer.height - amount, amount:buffer.width - amount]
    return Buffer(data, buffer.padding - amount)


def unpad_into(dest: Buffer, src: Buffer) -> Buffer:
    """
    Copy the centred region of ``src`` into ``dest``'s existing array.

    The crop offset is inferred from the size difference, which must be the
    same on both axes. Used to hand a filter's padded working copy back to
    the caller's (less padded) buffer without reallocating it.
    """
    if src.padding < dest.padding:
        raise PaddingError(
            f"source padding {src.padding} is smaller than destination padding {dest.padding}"
        )
    if src.channels != 1 or dest.channels != src.channels:
        raise ChannelError(
            f"unpad_into needs two single-channel buffers, got {src.channels} and {dest.channels}"
        )
    amt_x = src.width - dest.width
    amt_y = src.height - dest.height
    if amt_x != amt_y or amt_x < 0 or amt_x % 2:
        raise ShapeMismatchError(
            f"cannot unpad {src.width}x{src.height} into {dest.width}x{dest.height}"
        )
    amount = amt_x // 2
    dest.data[...] = src.data[amount:amount + dest.height, amount:amount + dest.width]
    return dest


# --------------------------- pointwise ops ---------------------------

def merge_add(a: Buffer, b: Buffer) -> Buffer:
    """In place on ``a``: a[i] = min(a[i] + b[i], 255)."""
    if (a.width != b.width or a.height != b.height
            or a.channels != b.channels or a.padding != b.padding):
        raise ShapeMismatchError(f"cannot merge {a!r} with {b!r}")
    if a.data.size:
        a.data[...] = cv2.add(a.data, b.data)  # saturating for uint8
    return a


def threshold(buffer: Buffer, value: int) -> Buffer:
    """In place: cells below ``value`` become 0, everything else 255."""
    buffer.require_single_channel("threshold")
    buffer.require_nonempty("threshold")
    buffer.data[...] = np.where(buffer.data < value, 0, 255).astype(np.uint8)
    return buffer


def to_grayscale(buffer: Buffer) -> Buffer:
    """Collapse a BGR/BGRA buffer into a new single-channel luminance buffer."""
    if buffer.padding:
        raise PaddingError("grayscale conversion needs an unpadded buffer")
    buffer.require_nonempty("grayscale")
    if buffer.channels == 3:
        gray = cv2.cvtColor(buffer.data, cv2.COLOR_BGR2GRAY)
    elif buffer.channels == 4:
        gray = cv2.cvtColor(buffer.data, cv2.COLOR_BGRA2GRAY)
    else:
        raise ChannelError(f"grayscale needs 3 or 4 channels, got {buffer.channels}")
    return Buffer(gray, copy=False)


# -------------------------------- I/O --------------------------------

def load(path: PathLike) -> Buffer:
    """Decode an image file into an unpadded 8-bit buffer (BGR order for colour)."""
    img = cv2.imread(str(path), cv2.IMREAD_ANYCOLOR)
    if img is None:
        raise FileNotFoundError(f"Could not load image: {path}")
    return Buffer(img, copy=False)


def write(buffer: Buffer, path: PathLike) -> None:
    """Encode the full buffer (border included) to ``path``; format follows the suffix."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    try:
        ok = cv2.imwrite(str(path), buffer.data)
    except cv2.error as exc:
        raise OSError(f"Could not write image to {path}: {exc}") from exc
    if not ok:
        raise OSError(f"Could not write image to {path}")
