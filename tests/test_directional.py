"""Tests for direction buckets, non-maximum suppression and the two-pass filter."""

import math

import numpy as np
import pytest

from edgekit.buffer import Buffer
from edgekit.directional import (
    ANGLE_BUCKETS,
    UNCLASSIFIED,
    Direction,
    classify_direction,
    classify_directions,
    gradient_angles,
    suppress_non_maxima,
    two_pass,
)
from edgekit.errors import ChannelError, DimensionError, PaddingError
from edgekit.kernel import create, sobel_kernels


# ------------------------------ buckets ------------------------------

def test_buckets_tile_the_circle():
    """Test the (lo, hi] intervals cover (-pi, pi] end to end with no gap or overlap."""
    intervals = sorted((lo, hi) for _, lo, hi in ANGLE_BUCKETS)

    assert intervals[0][0] == -math.pi
    assert intervals[-1][1] == math.pi
    for (_, hi), (lo, _) in zip(intervals, intervals[1:]):
        assert hi == lo
    assert all(lo < hi for lo, hi in intervals)


def test_every_sampled_angle_has_exactly_one_bucket():
    angles = np.concatenate([
        np.linspace(-math.pi, math.pi, 20001)[1:],
        [hi for _, _, hi in ANGLE_BUCKETS],
    ])
    for angle in angles:
        hits = [d for d, lo, hi in ANGLE_BUCKETS if lo < angle <= hi]
        assert len(hits) == 1, angle


def test_minus_pi_is_outside_every_bucket():
    """Test the one angle atan2 can return that no bucket claims."""
    with pytest.raises(ValueError, match="outside"):
        classify_direction(-math.pi)
    assert classify_directions(np.array([-math.pi]))[0] == UNCLASSIFIED


@pytest.mark.parametrize("direction, lo, hi", ANGLE_BUCKETS)
def test_bucket_edges(direction, lo, hi):
    """Test the upper edge is inside a bucket and the lower edge is not."""
    assert classify_direction(hi) == direction
    assert classify_direction(float(np.nextafter(lo, math.inf))) == direction
    if lo != -math.pi:
        assert classify_direction(lo) != direction


@pytest.mark.parametrize("angle, expected", [
    (0.0, Direction.HORIZONTAL),
    (math.pi, Direction.HORIZONTAL),
    (math.pi / 4, Direction.DIAGONAL_FORWARD),
    (-math.pi / 4, Direction.DIAGONAL_FORWARD),
    (math.pi / 2, Direction.VERTICAL),
    (-math.pi / 2, Direction.VERTICAL),
    (3 * math.pi / 4, Direction.DIAGONAL_BACKWARD),
    (-3 * math.pi / 4, Direction.DIAGONAL_BACKWARD),
])
def test_bucket_centres(angle, expected):
    assert classify_direction(angle) == expected


def test_vectorised_matches_scalar(rng):
    angles = rng.uniform(-math.pi, math.pi, size=(30, 30))
    got = classify_directions(angles)
    expected = np.vectorize(lambda a: int(classify_direction(a)))(angles)
    assert np.array_equal(got, expected)


def test_byte_responses_stay_in_first_quadrant(rng):
    """Test non-negative pass values can only produce angles in [0, pi/2]."""
    first = rng.integers(0, 256, (40, 40), dtype=np.uint8)
    second = rng.integers(0, 256, (40, 40), dtype=np.uint8)
    angles = gradient_angles(first, second)

    assert angles.min() >= 0.0
    assert angles.max() <= math.pi / 2
    assert not (classify_directions(angles) == Direction.DIAGONAL_BACKWARD).any()


def test_neighbour_table():
    assert Direction.HORIZONTAL.neighbours == ((-1, 0), (1, 0))
    assert Direction.VERTICAL.neighbours == ((0, -1), (0, 1))
    assert Direction.DIAGONAL_FORWARD.neighbours == ((-1, 1), (1, -1))
    assert Direction.DIAGONAL_BACKWARD.neighbours == ((-1, -1), (1, 1))


# ------------------------- non-maximum suppression -------------------

def _ridge():
    mag = np.zeros((5, 5), dtype=np.uint8)
    mag[:, 1] = 50
    mag[:, 2] = 100
    mag[:, 3] = 50
    return mag


def test_suppression_keeps_ridge_across_vertical_edge():
    """Test a vertical edge is thinned to its brightest column."""
    mag = _ridge()
    dirs = np.full(mag.shape, Direction.VERTICAL, dtype=np.int8)

    out = suppress_non_maxima(mag, dirs, padding=1)

    assert out[1:4, 1].tolist() == [0, 0, 0]
    assert out[1:4, 2].tolist() == [100, 100, 100]
    assert out[1:4, 3].tolist() == [0, 0, 0]
    assert np.array_equal(out[0], mag[0])  # border copied through
    assert np.array_equal(mag, _ridge())  # input untouched


def test_suppression_compares_along_bucket_only():
    """Test the same ridge survives when the cells compare above/below."""
    mag = _ridge()
    dirs = np.full(mag.shape, Direction.HORIZONTAL, dtype=np.int8)
    assert np.array_equal(suppress_non_maxima(mag, dirs, padding=1), mag)


def test_suppression_diagonals():
    mag = np.zeros((5, 5), dtype=np.uint8)
    mag[2, 2] = 10
    mag[1, 3] = 20  # up-right
    fwd = np.full(mag.shape, Direction.DIAGONAL_FORWARD, dtype=np.int8)
    back = np.full(mag.shape, Direction.DIAGONAL_BACKWARD, dtype=np.int8)

    assert suppress_non_maxima(mag, fwd, 1)[2, 2] == 0
    assert suppress_non_maxima(mag, back, 1)[2, 2] == 10


def test_suppression_sees_zeroed_left_neighbour():
    """Test a cell is compared with its left neighbour after that neighbour was suppressed."""
    mag = np.zeros((3, 5), dtype=np.uint8)
    mag[1, 1:4] = [30, 20, 10]
    dirs = np.full(mag.shape, Direction.VERTICAL, dtype=np.int8)

    out = suppress_non_maxima(mag, dirs, padding=1)

    assert out[1].tolist() == [0, 30, 0, 10, 0]


def test_suppression_chain_of_left_neighbours():
    """Test survivors alternate along a falling run scanned left to right."""
    mag = np.zeros((3, 7), dtype=np.uint8)
    mag[1, 1:6] = [50, 40, 30, 20, 10]
    dirs = np.full(mag.shape, Direction.VERTICAL, dtype=np.int8)

    out = suppress_non_maxima(mag, dirs, padding=1)

    assert out[1].tolist() == [0, 50, 0, 30, 0, 10, 0]


def test_suppression_sees_zeroed_row_above():
    """Test a cell is compared with the cell above after that cell was suppressed."""
    mag = np.zeros((5, 3), dtype=np.uint8)
    mag[1:4, 1] = [30, 20, 10]
    dirs = np.full(mag.shape, Direction.HORIZONTAL, dtype=np.int8)

    out = suppress_non_maxima(mag, dirs, padding=1)

    assert out[:, 1].tolist() == [0, 30, 0, 10, 0]


def test_suppression_right_and_below_use_original_values():
    """Test the not yet visited neighbours are read before suppression."""
    mag = np.zeros((3, 6), dtype=np.uint8)
    mag[1, 1:5] = [10, 20, 30, 40]
    dirs = np.full(mag.shape, Direction.VERTICAL, dtype=np.int8)

    out = suppress_non_maxima(mag, dirs, padding=1)

    assert out[1].tolist() == [0, 0, 0, 0, 40, 0]


def test_suppression_needs_padding():
    with pytest.raises(PaddingError):
        suppress_non_maxima(np.zeros((3, 3), np.uint8), np.zeros((3, 3), np.int8), 0)


# ------------------------------ two-pass -----------------------------

def test_two_pass_sobel_falling_step(falling_step):
    """Test exact Sobel magnitudes around a bright-to-dark vertical step."""
    kx, ky = sobel_kernels()
    two_pass(falling_step, kx, ky)

    assert falling_step.padding == 0
    assert falling_step.data.tolist() == [
        [0, 191, 191, 0, 0],
        [0, 255, 255, 0, 0],
        [0, 255, 255, 0, 0],
        [0, 255, 255, 0, 0],
        [191, 255, 255, 0, 0],
    ]


def test_two_pass_negative_responses_clamp(rising_step):
    """Test a dark-to-bright step gives no response at the step, only at the black border."""
    kx, ky = sobel_kernels()
    two_pass(rising_step, kx, ky)
    out = rising_step.data

    assert not out[:4, :4].any()
    assert out[1:4, 4].tolist() == [255, 255, 255]


def test_two_pass_thinning_keeps_the_peak():
    """Test thinning reduces a three-cell wide response to its maximum."""
    row = np.array([255, 255, 128, 0, 0, 0], dtype=np.uint8)
    data = np.tile(row, (7, 1))
    kx, ky = sobel_kernels()

    wide = Buffer(data)
    two_pass(wide, kx, ky, thinning=False)
    thin = Buffer(data)
    two_pass(thin, kx, ky, thinning=True)

    for r in range(1, 6):
        assert wide.data[r].tolist() == [0, 127, 255, 128, 0, 0]
        assert thin.data[r].tolist() == [0, 0, 255, 0, 0, 0]


def test_two_pass_on_prepadded_buffer_keeps_size():
    buf = Buffer(np.zeros((6, 6), dtype=np.uint8), padding=1)
    buf.data[1:5, 1:3] = 200
    kx, ky = sobel_kernels()

    two_pass(buf, kx, ky)

    assert (buf.width, buf.height, buf.padding) == (6, 6, 1)
    assert buf.data[2, 2] == 200


def test_two_pass_identity_kernels_double_the_image():
    """Test the merge is a saturating add of the two passes."""
    buf = Buffer(np.array([[10, 100, 200]], dtype=np.uint8))
    one = create(1, 1, 1.0, [[1]])
    two_pass(buf, one, one)
    assert buf.data.tolist() == [[20, 200, 255]]


def test_two_pass_validation():
    kx, ky = sobel_kernels()
    with pytest.raises(ChannelError):
        two_pass(Buffer(np.zeros((4, 4, 3), dtype=np.uint8)), kx, ky)
    with pytest.raises(DimensionError):
        two_pass(Buffer(np.zeros((0, 0), dtype=np.uint8)), kx, ky)
