"""
Discretization module for LR splines.

Provides:
- KnotVector: Global knot vector (seeds tensor-product surfaces)
- BasisFunction: B-spline with local knot vectors
- Element: LR element with basis function linking
- Mesh: LR mesh topology with support queries
"""

from .knot_vector import KnotVector, make_open_knot_vector, make_uniform_knot_vector
from .basis_function import BasisFunction
from .element import Element
from .mesh import Mesh, build_lr_mesh, build_tensor_basis
