"""
Geometry module for LR spline surfaces.

Import surfaces directly to avoid circular imports:
    from lrIGA.geometry.lr_spline import LRSplineSurface
    from lrIGA.geometry.primitives import make_lr_unit_square
"""

from .bspline import eval_local_basis, greville_coordinate
