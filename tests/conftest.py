import numpy as np
import pytest

from edgekit.buffer import Buffer


@pytest.fixture
def falling_step():
    """5x5 buffer: 255 in columns 0-1, 0 in columns 2-4."""
    data = np.zeros((5, 5), dtype=np.uint8)
    data[:, :2] = 255
    return Buffer(data)


@pytest.fixture
def rising_step():
    """5x5 buffer: 0 in columns 0-1, 255 in columns 2-4."""
    data = np.zeros((5, 5), dtype=np.uint8)
    data[:, 2:] = 255
    return Buffer(data)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
