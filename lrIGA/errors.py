"""
Error taxonomy for field recovery.

Every failure raised by the recovery building blocks derives from
RecoveryError so that the public operations can report it uniformly:

- ConfigurationError: invalid parametric direction, missing surface,
  unsupported rational basis, invalid configuration values
- QuadratureUnavailable: no Gauss table for the requested number of points
- TopologyError: negative parametric measure, inverted geometric mapping,
  missing nodal coordinates
- SizeMismatch: sample array length differs from the basis function count
- LinearSystemError: singular or unsolvable system (local or global)

The public operations (project_solution, global_l2_projection, sc_recovery,
regular_interpolation, recover) are wrapped with fail_safe: a RecoveryError
is logged and turned into a None result. Any other exception is a
programming error and propagates.
"""

import functools
import logging
from typing import Callable


_LOGGER = logging.getLogger(__name__)


class RecoveryError(Exception):
    """Base class of all recovery failures."""


class ConfigurationError(RecoveryError, ValueError):
    """Invalid input configuration (direction, basis type, settings)."""


class QuadratureUnavailable(RecoveryError):
    """No quadrature table exists for the requested order."""

    def __init__(self, n_points: int, max_points: int):
        self.n_points = n_points
        self.max_points = max_points
        super().__init__(
            f"No Gauss-Legendre table for {n_points} points "
            f"(available: 1..{max_points})"
        )


class TopologyError(RecoveryError):
    """Degenerate mesh topology or geometric mapping."""


class SizeMismatch(RecoveryError, ValueError):
    """Sample array size differs from the number of basis functions."""

    def __init__(self, what: str, expected: int, got: int):
        self.expected = expected
        self.got = got
        super().__init__(f"{what}: expected {expected} entries, got {got}")


class LinearSystemError(RecoveryError):
    """Singular or otherwise unsolvable linear system."""


def fail_safe(func: Callable) -> Callable:
    """
    Turn RecoveryError raised by func into a logged None result.

    Used on the public recovery operations, whose callers check the
    result for None instead of catching exceptions.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except RecoveryError as exc:
            _LOGGER.error("%s failed: %s", func.__name__, exc)
            return None
    return wrapper
