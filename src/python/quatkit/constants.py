"""
===============================================================================
QUATKIT - Angle Constants and Numerical Tolerances
===============================================================================
Central place for the angle conversion factors and the tolerances used by the
checked quaternion operations. Angles are radians throughout the library;
degrees only appear at the command line boundary.
===============================================================================
"""

import numpy as np


# =============================================================================
# MATHEMATICAL CONSTANTS
# =============================================================================
PI = np.pi
DEG2RAD = PI / 180.0
RAD2DEG = 180.0 / PI

# =============================================================================
# TOLERANCES
# =============================================================================
# Below this norm a quaternion is treated as degenerate by the checked ops
NORM_TOLERANCE = 1e-12

# Slack allowed on the pitch asin argument before a checked euler() refuses
ASIN_DOMAIN_TOLERANCE = 1e-9

# Default absolute tolerance for Quaternion.isclose()
COMPARISON_TOLERANCE = 1e-9

# Maximum ||R^T R - I|| accepted by from_rot_mat()
ORTHONORMALITY_TOLERANCE = 1e-6
