"""
lrIGA - Field recovery on LR spline surfaces

Recovers smooth, basis-represented fields (stresses, strains, fluxes or
any derived quantity) from values sampled at the integration points of a
locally refined (LR) spline discretization, as used in isogeometric
analysis. The result is one coefficient per basis function and field
component, carried by a copy of the geometry surface.

Key modules:
- geometry: LR spline surfaces, local B-spline evaluation, primitives
- discretization: Knot vectors, elements, basis functions, LR mesh topology
- recovery: Greville interpolation, global L2 projection, patch recovery
- quadrature: Gauss-Legendre tables
- solver: Sparse and dense direct solvers
- io: YAML configuration
- postprocess: Field sampling and error norms

Quick start:
    from lrIGA.geometry.primitives import make_lr_unit_square
    from lrIGA.recovery import FunctionEvaluator, global_l2_projection

    surface = make_lr_unit_square(p=2, n_elem_u=4, n_elem_v=4)
    stress = FunctionEvaluator(lambda x, y: (x * y, x - y), n_fields=2)

    coefficients = global_l2_projection(surface, stress)
    if coefficients is None:
        ...  # failure was logged

Quick start (configuration driven):
    from lrIGA.io.config import load_config
    from lrIGA.recovery import recover

    config = load_config("recovery.yaml")
    field = recover(surface, stress, config)
"""

__version__ = "0.1.0"
__author__ = "Wataru Fukuda"

# Core imports for convenience
from .errors import (
    RecoveryError,
    ConfigurationError,
    QuadratureUnavailable,
    TopologyError,
    SizeMismatch,
    LinearSystemError,
)
from .geometry.lr_spline import LRSplineSurface
from .geometry.primitives import make_lr_unit_square, make_lr_rectangle
from .io.config import RecoveryConfig, ProjectionMethod, load_config
from .recovery import (
    project_solution,
    global_l2_projection,
    sc_recovery,
    regular_interpolation,
    recover,
)
