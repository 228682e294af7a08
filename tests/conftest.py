"""
Pytest configuration and shared fixtures for lrIGA tests.
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add the parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from lrIGA.discretization.knot_vector import KnotVector
from lrIGA.geometry.primitives import (
    make_lr_unit_square, make_lr_t_junction_square, make_lr_tensor_surface
)


@pytest.fixture
def tolerance():
    """Default tolerance for floating point comparisons."""
    return 1e-12


@pytest.fixture
def loose_tolerance():
    """Looser tolerance for numerical integration and solves."""
    return 1e-8


@pytest.fixture
def t_junction_surface():
    """
    Bilinear unit square with a T-junction at (0.25, 0.5).

    Basis functions (u knots x v knots):
        0: [0, 0, .25]  x [0, 0, .5]      5: [0, .5, 1]  x [0, .5, 1]
        1: [0, .25, .5] x [0, 0, .5]      6: [.5, 1, 1]  x [0, .5, 1]
        2: [.25, .5, 1] x [0, 0, .5]      7: [0, 0, .5]  x [.5, 1, 1]
        3: [.5, 1, 1]   x [0, 0, .5]      8: [0, .5, 1]  x [.5, 1, 1]
        4: [0, 0, .5]   x [0, .5, 1]      9: [.5, 1, 1]  x [.5, 1, 1]

    Elements:
        0: [0, .25] x [0, .5]     3: [0, .5] x [.5, 1]
        1: [.25, .5] x [0, .5]    4: [.5, 1] x [.5, 1]
        2: [.5, 1] x [0, .5]
    """
    return make_lr_t_junction_square()


@pytest.fixture
def biquadratic_square():
    """Biquadratic unit square with 3x3 elements."""
    return make_lr_unit_square(p=2, n_elem_u=3, n_elem_v=3)


@pytest.fixture
def zero_span_surface():
    """
    Unit square, quadratic C0 in u and linear in v, 2x2 elements.

    Basis function 1 has local u knots [0, 0, .5, .5]: its direct support
    is a single element while its knot vector has two zero-length spans.
    """
    kv_u = KnotVector(np.array([0.0, 0.0, 0.0, 0.5, 0.5, 1.0, 1.0, 1.0]), 2)
    kv_v = KnotVector(np.array([0.0, 0.0, 0.5, 1.0, 1.0]), 1)
    return make_lr_tensor_surface(kv_u, kv_v)
