"""
Bundled sample for examples and the command-line report.
"""

import numpy as np
from numpy.typing import NDArray

# Tensile strength (GPa) of single carbon fibres tested at 1 mm gauge length,
# after Bader & Priest (1982). n = 57, sorted ascending, MLE S/n = 18.621749.
# This stands in for the 56-fibre course sample (MLE 18.814582) and is not
# that sample; the two estimates are not expected to match.
fiber_strength = np.array([
    2.247, 2.640, 2.842, 2.908, 3.099, 3.126, 3.245, 3.328, 3.355, 3.383,
    3.572, 3.581, 3.681, 3.726, 3.727, 3.728, 3.783, 3.785, 3.786, 3.896,
    3.912, 3.964, 4.050, 4.063, 4.082, 4.111, 4.118, 4.141, 4.216, 4.251,
    4.262, 4.326, 4.402, 4.457, 4.466, 4.519, 4.542, 4.555, 4.614, 4.632,
    4.634, 4.636, 4.678, 4.698, 4.738, 4.832, 4.924, 5.043, 5.099, 5.134,
    5.359, 5.473, 5.571, 5.684, 5.721, 5.998, 6.060,
])
fiber_strength.setflags(write=False)


def load_fiber_strength() -> NDArray[np.float64]:
    """Return a writable copy of the carbon-fibre strength sample."""
    return fiber_strength.copy()
