"""
===============================================================================
QUATKIT - Quaternion Algebra Package
===============================================================================
Quaternion value type with composition, normalization, inversion, and
conversion to/from roll-pitch-yaw Euler angles and rotation matrices.

Submodules:
    quaternion -- Quaternion type and the operations on it
    constants  -- angle conversion factors and tolerances
    config     -- YAML configuration for the command line tool
    cli        -- ``quatkit`` command line entry point
===============================================================================
"""

from quatkit.quaternion import (
    DegenerateQuaternionError,
    Quaternion,
    conj,
    euler,
    from_axis_angle,
    from_euler,
    from_rot_mat,
    inv,
    norm,
    norm2,
    prod,
    qsum,
    require_nonzero,
    rot_mat,
    rotate_vector,
    scalar,
    to_axis_angle,
    unit,
)

__version__ = '1.0.0'

__all__ = [
    'DegenerateQuaternionError',
    'Quaternion',
    'conj',
    'euler',
    'from_axis_angle',
    'from_euler',
    'from_rot_mat',
    'inv',
    'norm',
    'norm2',
    'prod',
    'qsum',
    'require_nonzero',
    'rot_mat',
    'rotate_vector',
    'scalar',
    'to_axis_angle',
    'unit',
]
