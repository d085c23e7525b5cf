import numpy as np
import pytest

from rayleighmle.datasets import load_fiber_strength


@pytest.fixture
def fiber_strength():
    return load_fiber_strength()


@pytest.fixture
def constant_sample():
    """All-equal sample; the MLE is x**2 = 9."""
    return np.full(8, 3.0)
