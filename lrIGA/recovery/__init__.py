"""
Field recovery on LR spline surfaces.

Provides:
- greville_parameters, expand_tensor_grid: parametric sample sets
- FieldEvaluator and concrete evaluators: field data sources
- GlobalL2Projector / global_l2_projection: continuous and discrete L2
- PatchRecovery / sc_recovery: superconvergent patch recovery
- interpolate / regular_interpolation / project_solution: Greville interpolation
- recover: method selected by RecoveryConfig

The lower-case public operations return None on failure and log the reason.
"""

from .sampling import greville_parameters, expand_tensor_grid
from .evaluator import (
    FieldEvaluator,
    FunctionEvaluator,
    SplineFieldEvaluator,
    SolutionGradientEvaluator,
)
from .interpolation import interpolate, regular_interpolation, project_solution, make_field_surface
from .global_l2 import GlobalL2Projector, global_l2_projection
from .patch_recovery import PatchRecovery, sc_recovery, eval_monomials
from .methods import recover
