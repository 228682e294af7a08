"""
Configuration-driven selection of the recovery method.

    config = RecoveryConfig(method="scr")
    field = recover(surface, SolutionGradientEvaluator(u), config)
    if field is None:
        ...  # failure was logged

All methods return a new surface on the basis of the input surface whose
coefficients are the recovered field.
"""

import logging
from typing import Optional

from ..errors import ConfigurationError, fail_safe
from ..geometry.lr_spline import LRSplineSurface
from ..io.config import ProjectionMethod, RecoveryConfig
from ..quadrature.gauss import GaussQuadratureTable
from .evaluator import FieldEvaluator
from .global_l2 import GlobalL2Projector
from .interpolation import interpolate, make_field_surface
from .patch_recovery import PatchRecovery
from .sampling import greville_parameters


_LOGGER = logging.getLogger(__name__)


@fail_safe
def recover(surface: LRSplineSurface, evaluator: FieldEvaluator,
            config: Optional[RecoveryConfig] = None,
            quadrature: Optional[GaussQuadratureTable] = None
            ) -> Optional[LRSplineSurface]:
    """
    Recover a field with the method selected by the configuration.

    Parameters:
        surface: Geometry surface
        evaluator: Field to recover
        config: Method and quadrature settings (defaults: continuous L2)
        quadrature: Gauss table, overrides the one from config

    Returns:
        New surface carrying the field, or None on failure
    """
    if surface is None:
        raise ConfigurationError("No surface to recover on")
    config = config if config is not None else RecoveryConfig()
    if quadrature is None:
        quadrature = config.quadrature_table()

    method = config.method
    _LOGGER.info("Recovering %d field component(s) with %s on %d basis functions",
                 evaluator.n_fields, method.value, surface.n_basis)

    if method is ProjectionMethod.GREVILLE:
        gpar_u = greville_parameters(surface, 0)
        gpar_v = greville_parameters(surface, 1)
        values = evaluator.evaluate(surface, gpar_u, gpar_v)
        return interpolate(surface, gpar_u, gpar_v, values)

    if method in (ProjectionMethod.GLOBAL_L2, ProjectionMethod.DISCRETE_L2):
        projector = GlobalL2Projector(surface, quadrature, config.n_gauss)
        coefficients = projector.project(
            evaluator, continuous=method is ProjectionMethod.GLOBAL_L2)
        return make_field_surface(surface, coefficients)

    if method is ProjectionMethod.SCR:
        gpar_u, gpar_v, values = PatchRecovery(surface, quadrature).recover_values(evaluator)
        return interpolate(surface, gpar_u, gpar_v, values)

    raise ConfigurationError(f"Unsupported recovery method {method}")
