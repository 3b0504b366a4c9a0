"""
===============================================================================
QUATKIT - Quaternion Algebra
===============================================================================

Quaternion value type and the pure functions that operate on it: conjugate,
norms, sum, Hamilton product, normalization, inversion, and conversion to and
from roll-pitch-yaw Euler angles and 3x3 rotation matrices.

Convention
----------
Scalar-first components:

    q = (w, x, y, z) = w + x*i + y*j + z*k

with Hamilton's rules i*j = k, j*k = i, k*i = j (so j*i = -k). The product
q1 * q2 composes rotations so that q2 is applied first.

Euler Angle Convention
----------------------
Roll (phi) about X, pitch (theta) about Y, yaw (psi) about Z, all in radians:

    phi   = atan2(2(wx + yz), 1 - 2(x^2 + y^2))
    theta = asin(2(wy - zx))
    psi   = atan2(2(xy + wz), 1 - 2(y^2 + z^2))

Degenerate Input
----------------
Nothing is enforced at construction: a Quaternion may hold any four floats,
including the zero quaternion and non-finite values. unit(), inv(), euler()
and rot_mat() divide by the norm and are deliberately unchecked. A zero
quaternion yields NaN / +-inf components exactly as IEEE-754 division
prescribes, and no exception is raised. Pass ``checked=True`` to get a
DegenerateQuaternionError instead.

References
----------
    [1] Diebel, "Representing Attitude: Euler Angles, Unit Quaternions, and
        Rotation Vectors", Stanford, 2006.
    [2] Shepperd, "Quaternion from Rotation Matrix", JGCD, 1978.

===============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple, Union

import numpy as np

from quatkit.constants import (
    ASIN_DOMAIN_TOLERANCE,
    COMPARISON_TOLERANCE,
    NORM_TOLERANCE,
    ORTHONORMALITY_TOLERANCE,
    RAD2DEG,
)

logger = logging.getLogger(__name__)


class DegenerateQuaternionError(ValueError):
    """Raised by the checked operations for a zero-norm or non-finite quaternion."""


# =============================================================================
# VALUE TYPE
# =============================================================================

@dataclass(frozen=True)
class Quaternion:
    """
    Immutable quaternion w + x*i + y*j + z*k.

    Any four real numbers are accepted; no normalization happens here.
    Use unit() when a rotation quaternion is needed.

    Attributes
    ----------
    w : float
        Scalar (real) component.
    x : float
        i component.
    y : float
        j component.
    z : float
        k component.

    Examples
    --------
    >>> q = Quaternion(1.0, 0.0, 0.0, 0.0)  # identity rotation
    >>> i, j = Quaternion(0, 1, 0, 0), Quaternion(0, 0, 1, 0)
    >>> i * j
    Quaternion(w=0.0, x=0.0, y=0.0, z=1.0)
    """
    w: float = 0.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __post_init__(self) -> None:
        # Coerce ints / numpy scalars so every field is a plain double
        for name in ('w', 'x', 'y', 'z'):
            object.__setattr__(self, name, float(getattr(self, name)))

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @staticmethod
    def identity() -> 'Quaternion':
        """Multiplicative identity (1, 0, 0, 0)."""
        return Quaternion(1.0, 0.0, 0.0, 0.0)

    @staticmethod
    def from_array(values: Sequence[float]) -> 'Quaternion':
        """
        Build a quaternion from any length-4 sequence ``[w, x, y, z]``.

        Raises
        ------
        ValueError
            If ``values`` does not hold exactly four numbers.
        """
        arr = np.asarray(values, dtype=np.float64)
        if arr.shape != (4,):
            raise ValueError(f"Quaternion needs 4 components, got shape {arr.shape}")
        return Quaternion(arr[0], arr[1], arr[2], arr[3])

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def components(self) -> np.ndarray:
        """Fresh float64 array [w, x, y, z]."""
        return np.array([self.w, self.x, self.y, self.z], dtype=np.float64)

    @property
    def vector(self) -> np.ndarray:
        """Imaginary part [x, y, z]."""
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @property
    def norm2(self) -> float:
        return norm2(self)

    @property
    def norm(self) -> float:
        return norm(self)

    def __iter__(self) -> Iterator[float]:
        return iter((self.w, self.x, self.y, self.z))

    # -------------------------------------------------------------------------
    # Method forms of the module functions
    # -------------------------------------------------------------------------

    def conjugate(self) -> 'Quaternion':
        return conj(self)

    def normalized(self, checked: bool = False) -> 'Quaternion':
        return unit(self, checked=checked)

    def inverse(self, checked: bool = False) -> 'Quaternion':
        return inv(self, checked=checked)

    def to_euler(self, checked: bool = False) -> Tuple[float, float, float]:
        return euler(self, checked=checked)

    def to_rot_mat(self, checked: bool = False) -> np.ndarray:
        return rot_mat(self, checked=checked)

    def rotate_vector(self, v: Sequence[float]) -> np.ndarray:
        return rotate_vector(self, v)

    def isclose(self, other: 'Quaternion',
                atol: float = COMPARISON_TOLERANCE) -> bool:
        """
        Component-wise comparison within ``atol``.

        Unlike ``==`` (exact), this tolerates rounding. It does NOT treat
        q and -q as equal even though they encode the same rotation.
        """
        return bool(np.allclose(self.components, other.components,
                                rtol=0.0, atol=atol))

    # -------------------------------------------------------------------------
    # Operators
    # -------------------------------------------------------------------------

    def __add__(self, other: 'Quaternion') -> 'Quaternion':
        if isinstance(other, Quaternion):
            return qsum(self, other)
        return NotImplemented

    def __sub__(self, other: 'Quaternion') -> 'Quaternion':
        if isinstance(other, Quaternion):
            return Quaternion(self.w - other.w, self.x - other.x,
                              self.y - other.y, self.z - other.z)
        return NotImplemented

    def __neg__(self) -> 'Quaternion':
        # -q is the same rotation as q (double cover)
        return Quaternion(-self.w, -self.x, -self.y, -self.z)

    def __mul__(self, other: Union['Quaternion', float, int]) -> 'Quaternion':
        """
        Quaternion * Quaternion is the Hamilton product; Quaternion * real
        scales every component.
        """
        if isinstance(other, Quaternion):
            return prod(self, other)
        if isinstance(other, (int, float, np.floating, np.integer)):
            s = float(other)
            return Quaternion(self.w * s, self.x * s, self.y * s, self.z * s)
        return NotImplemented

    def __rmul__(self, other: Union[float, int]) -> 'Quaternion':
        if isinstance(other, (int, float, np.floating, np.integer)):
            return self.__mul__(other)
        return NotImplemented

    def __str__(self) -> str:
        return (f"[{self.w:+.6f}, {self.x:+.6f}, {self.y:+.6f}, "
                f"{self.z:+.6f}]")

    def as_attitude_string(self) -> str:
        """Roll/pitch/yaw of this quaternion in degrees, for display."""
        phi, theta, psi = euler(self)
        return (f"Roll={phi * RAD2DEG:+7.2f} deg, "
                f"Pitch={theta * RAD2DEG:+7.2f} deg, "
                f"Yaw={psi * RAD2DEG:+7.2f} deg")


# =============================================================================
# CONSTRUCTION & ALGEBRA
# =============================================================================

def scalar(w: float) -> Quaternion:
    """Purely real quaternion (w, 0, 0, 0)."""
    return Quaternion(w, 0.0, 0.0, 0.0)


def conj(q: Quaternion) -> Quaternion:
    """
    Conjugate (w, -x, -y, -z).

    Negation is exact in floating point, so conj(conj(q)) == q bit for bit.
    """
    return Quaternion(q.w, -q.x, -q.y, -q.z)


def norm2(q: Quaternion) -> float:
    """Squared Euclidean norm w^2 + x^2 + y^2 + z^2."""
    # Plain multiplication overflows to inf; ** would raise OverflowError
    return q.w * q.w + q.x * q.x + q.y * q.y + q.z * q.z


def norm(q: Quaternion) -> float:
    """Euclidean norm sqrt(norm2(q)). Zero only for the zero quaternion."""
    return float(np.sqrt(norm2(q)))


def qsum(*qs: Quaternion) -> Quaternion:
    """
    Component-wise sum of any number of quaternions.

    This is vector addition, not composition. qsum() is (0, 0, 0, 0).
    """
    w = x = y = z = 0.0
    for q in qs:
        w += q.w
        x += q.x
        y += q.y
        z += q.z
    return Quaternion(w, x, y, z)


def prod(*qs: Quaternion) -> Quaternion:
    """
    Hamilton product of any number of quaternions, folded left to right.

    The fold starts from the identity, so prod() is (1, 0, 0, 0) and
    prod(a, b, c) is (a*b)*c. The product is NOT commutative:

        prod(i, j) = k      prod(j, i) = -k

    Parameters
    ----------
    *qs : Quaternion
        Operands in multiplication order.

    Returns
    -------
    Quaternion
        The ordered product.
    """
    w, x, y, z = 1.0, 0.0, 0.0, 0.0
    for q in qs:
        w, x, y, z = (
            w * q.w - x * q.x - y * q.y - z * q.z,
            w * q.x + x * q.w + y * q.z - z * q.y,
            w * q.y + y * q.w + z * q.x - x * q.z,
            w * q.z + z * q.w + x * q.y - y * q.x,
        )
    return Quaternion(w, x, y, z)


# =============================================================================
# NORMALIZATION & INVERSION
# =============================================================================

def require_nonzero(q: Quaternion, tolerance: float = NORM_TOLERANCE) -> float:
    """
    Check that ``q`` can be normalized and return its norm.

    Raises
    ------
    DegenerateQuaternionError
        If any component is non-finite or the norm is below ``tolerance``.
    """
    if not np.all(np.isfinite(q.components)):
        raise DegenerateQuaternionError(f"Quaternion has non-finite components: {q!r}")
    n = norm(q)
    if n < tolerance:
        raise DegenerateQuaternionError(
            f"Cannot normalize near-zero quaternion (norm = {n:.2e})."
        )
    return n


def _divide(q: Quaternion, k: float) -> Quaternion:
    # IEEE-754 division: x/0 -> +-inf, 0/0 -> nan, without numpy warnings
    with np.errstate(divide='ignore', invalid='ignore'):
        c = q.components / np.float64(k)
    return Quaternion(c[0], c[1], c[2], c[3])


def unit(q: Quaternion, checked: bool = False) -> Quaternion:
    """
    Rescale ``q`` to unit norm.

    Precondition: ``q`` is non-zero. The zero quaternion is not trapped
    unless ``checked`` is set; the result then has NaN components.

    Parameters
    ----------
    q : Quaternion
        Quaternion to normalize.
    checked : bool, optional
        Raise DegenerateQuaternionError instead of returning NaN/inf.

    Returns
    -------
    Quaternion
        q / norm(q).
    """
    if checked:
        k = require_nonzero(q)
    else:
        k = norm(q)
        if not k > 0.0:
            logger.debug("unit() on degenerate quaternion %r (norm=%r)", q, k)
    return _divide(q, k)


def inv(q: Quaternion, checked: bool = False) -> Quaternion:
    """
    Multiplicative inverse conj(q) / norm2(q).

    For non-zero q, prod(q, inv(q)) and prod(inv(q), q) are the identity up
    to rounding. Same zero-quaternion behaviour as unit().
    """
    if checked:
        require_nonzero(q)
    k2 = norm2(q)
    if not checked and not k2 > 0.0:
        logger.debug("inv() on degenerate quaternion %r (norm2=%r)", q, k2)
    return _divide(conj(q), k2)


# =============================================================================
# ANGLE CONVERSIONS
# =============================================================================

def euler(q: Quaternion, checked: bool = False) -> Tuple[float, float, float]:
    """
    Roll-pitch-yaw angles (phi, theta, psi) in radians.

    The quaternion is normalized first. The pitch asin argument is not
    clamped: rounding that pushes it past +-1 near gimbal lock gives a NaN
    pitch. With ``checked=True`` a degenerate quaternion raises, small
    excursions (within ASIN_DOMAIN_TOLERANCE) are clamped, and larger ones
    raise DegenerateQuaternionError.

    Returns
    -------
    tuple of (float, float, float)
        phi in [-pi, pi], theta in [-pi/2, pi/2], psi in [-pi, pi].
    """
    r = unit(q, checked=checked)
    w, x, y, z = r.w, r.x, r.y, r.z

    sin_pitch = 2.0 * (w * y - z * x)
    if checked:
        if abs(sin_pitch) > 1.0 + ASIN_DOMAIN_TOLERANCE:
            raise DegenerateQuaternionError(
                f"Pitch sine {sin_pitch!r} is outside [-1, 1]"
            )
        sin_pitch = min(1.0, max(-1.0, sin_pitch))

    with np.errstate(invalid='ignore'):
        phi = np.arctan2(2.0 * (w * x + y * z), 1.0 - 2.0 * (x * x + y * y))
        theta = np.arcsin(sin_pitch)
        psi = np.arctan2(2.0 * (x * y + w * z), 1.0 - 2.0 * (y * y + z * z))

    return float(phi), float(theta), float(psi)


def from_euler(phi: float, theta: float, psi: float) -> Quaternion:
    """
    Quaternion for roll ``phi``, pitch ``theta``, yaw ``psi`` (radians).

    Inverse of euler() under the same convention. The result is a unit
    quaternion; each angle has period 4*pi at the quaternion level since q
    and -q are the same rotation.
    """
    with np.errstate(invalid='ignore'):
        c_phi, s_phi = np.cos(phi / 2.0), np.sin(phi / 2.0)
        c_theta, s_theta = np.cos(theta / 2.0), np.sin(theta / 2.0)
        c_psi, s_psi = np.cos(psi / 2.0), np.sin(psi / 2.0)

    w = c_phi * c_theta * c_psi + s_phi * s_theta * s_psi
    x = s_phi * c_theta * c_psi - c_phi * s_theta * s_psi
    y = c_phi * s_theta * c_psi + s_phi * c_theta * s_psi
    z = c_phi * c_theta * s_psi - s_phi * s_theta * c_psi

    return Quaternion(w, x, y, z)


def rot_mat(q: Quaternion, checked: bool = False) -> np.ndarray:
    """
    3x3 rotation matrix of unit(q).

    The matrix is orthonormal with determinant +1 for any non-zero q,
    rot_mat(q) equals rot_mat(-q) exactly, and

        rot_mat(prod(a, b)) == rot_mat(a) @ rot_mat(b)

    up to rounding.

    Returns
    -------
    np.ndarray
        Shape (3, 3) float64 array.
    """
    r = unit(q, checked=checked)
    w, x, y, z = r.w, r.x, r.y, r.z

    return np.array([
        [1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y - w * z),       2.0 * (w * y + x * z)],
        [2.0 * (w * z + y * x),       1.0 - 2.0 * (z * z + x * x), 2.0 * (y * z - w * x)],
        [2.0 * (z * x - w * y),       2.0 * (w * x + z * y),       1.0 - 2.0 * (x * x + y * y)],
    ], dtype=np.float64)


def from_rot_mat(m: Sequence[Sequence[float]]) -> Quaternion:
    """
    Quaternion from a 3x3 rotation matrix (inverse of rot_mat()).

    Uses Shepperd's method: of the four quantities proportional to
    4w^2, 4x^2, 4y^2, 4z^2 the largest is square-rooted first and the other
    components are recovered from off-diagonal sums and differences. This
    stays accurate near 180-degree rotations where the trace-only formula
    breaks down.

    Parameters
    ----------
    m : array_like
        Proper orthogonal 3x3 matrix (R^T R = I, det R = +1).

    Returns
    -------
    Quaternion
        Unit quaternion with rot_mat(result) == m up to rounding.

    Raises
    ------
    ValueError
        If ``m`` is not 3x3, not orthonormal, or a reflection.
    """
    m = np.asarray(m, dtype=np.float64)
    if m.shape != (3, 3):
        raise ValueError(f"Rotation matrix must be 3x3, got shape {m.shape}")

    orthogonality_error = np.linalg.norm(m.T @ m - np.eye(3))
    if not orthogonality_error <= ORTHONORMALITY_TOLERANCE:
        raise ValueError(
            f"Matrix is not orthonormal (error = {orthogonality_error:.2e})"
        )
    if np.linalg.det(m) < 0.0:
        raise ValueError("Matrix is a reflection (det = -1), not a rotation")

    trace = np.trace(m)
    d = (
        1.0 + trace,                     # 4w^2
        1.0 + 2.0 * m[0, 0] - trace,     # 4x^2
        1.0 + 2.0 * m[1, 1] - trace,     # 4y^2
        1.0 + 2.0 * m[2, 2] - trace,     # 4z^2
    )
    largest = int(np.argmax(d))

    if largest == 0:
        w = 0.5 * np.sqrt(d[0])
        s = 0.25 / w
        x = (m[2, 1] - m[1, 2]) * s
        y = (m[0, 2] - m[2, 0]) * s
        z = (m[1, 0] - m[0, 1]) * s
    elif largest == 1:
        x = 0.5 * np.sqrt(d[1])
        s = 0.25 / x
        w = (m[2, 1] - m[1, 2]) * s
        y = (m[0, 1] + m[1, 0]) * s
        z = (m[0, 2] + m[2, 0]) * s
    elif largest == 2:
        y = 0.5 * np.sqrt(d[2])
        s = 0.25 / y
        w = (m[0, 2] - m[2, 0]) * s
        x = (m[0, 1] + m[1, 0]) * s
        z = (m[1, 2] + m[2, 1]) * s
    else:
        z = 0.5 * np.sqrt(d[3])
        s = 0.25 / z
        w = (m[1, 0] - m[0, 1]) * s
        x = (m[0, 2] + m[2, 0]) * s
        y = (m[1, 2] + m[2, 1]) * s

    return Quaternion(w, x, y, z)


# =============================================================================
# AXIS-ANGLE & VECTOR ROTATION
# =============================================================================

def from_axis_angle(axis: Sequence[float], angle: float) -> Quaternion:
    """
    Rotation by ``angle`` radians about ``axis``.

        q = (cos(angle/2), sin(angle/2) * n)

    where n is ``axis`` normalized.

    Raises
    ------
    ValueError
        If ``axis`` is not a 3-vector or has near-zero length.
    """
    axis = np.asarray(axis, dtype=np.float64)
    if axis.shape != (3,):
        raise ValueError(f"Rotation axis must be a 3-vector, got shape {axis.shape}")

    axis_norm = np.linalg.norm(axis)
    if axis_norm < NORM_TOLERANCE:
        raise ValueError("Rotation axis has near-zero magnitude")

    n = axis / axis_norm
    half_angle = angle / 2.0
    sin_half = np.sin(half_angle)
    return Quaternion(np.cos(half_angle), sin_half * n[0], sin_half * n[1], sin_half * n[2])


def to_axis_angle(q: Quaternion) -> Tuple[np.ndarray, float]:
    """
    Axis and angle of unit(q).

    The angle is 2*atan2(|v|, w), in [0, 2*pi], so from_axis_angle() of
    the result reproduces unit(q) including its sign. When the vector part
    vanishes the axis is undefined and [0, 0, 1] is returned.
    """
    r = unit(q)
    v = r.vector
    v_norm = np.linalg.norm(v)
    angle = float(2.0 * np.arctan2(v_norm, r.w))

    if v_norm < NORM_TOLERANCE:
        return np.array([0.0, 0.0, 1.0]), angle
    return v / v_norm, angle


def rotate_vector(q: Quaternion, v: Sequence[float]) -> np.ndarray:
    """Rotate the 3-vector ``v`` by ``q``: rot_mat(q) @ v."""
    v = np.asarray(v, dtype=np.float64)
    if v.shape != (3,):
        raise ValueError(f"Can only rotate a 3-vector, got shape {v.shape}")
    return rot_mat(q) @ v
