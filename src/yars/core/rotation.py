"""Rotation group used to orient the camera.

Rotations are host-side values backed by NumPy 3x3 matrices. They are
built from elementary rotations around the coordinate axes and compose
under multiplication:

    >>> from yars.core.rotation import Rotation
    >>> import math
    >>> turn = Rotation.rotation_y(math.pi / 2) * Rotation.rotation_x(0.1)
    >>> forward = turn * (0.0, 0.0, 1.0)  # rotated view direction

Rotations never enter the per-ray hot path: the camera applies its
orientation once per primary ray direction before the ray is uploaded.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

Vector3 = tuple[float, float, float]

# Absolute tolerance for the orthogonality and determinant checks
ORTHOGONALITY_TOLERANCE = 1e-9


def matrix_distance(a: npt.NDArray[np.float64], b: npt.NDArray[np.float64]) -> float:
    """Sum of squared per-column differences between two 3x3 matrices.

    Only meant for approximate-equality checks, not as a true metric on
    the rotation group.
    """
    diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return float(sum(np.dot(diff[:, col], diff[:, col]) for col in range(3)))


class Rotation:
    """An orthogonal 3x3 matrix with determinant 1.

    Instances are immutable; every operation returns a new rotation.
    Construction raises ValueError unless the matrix is orthogonal with
    determinant 1, within ORTHOGONALITY_TOLERANCE.
    """

    __slots__ = ("_matrix",)

    def __init__(self, matrix: npt.ArrayLike) -> None:
        m = np.array(matrix, dtype=np.float64)
        if m.shape != (3, 3):
            raise ValueError(f"Rotation matrix must be 3x3, got shape {m.shape}")
        if not np.allclose(m @ m.T, np.identity(3), rtol=0.0, atol=ORTHOGONALITY_TOLERANCE):
            raise ValueError("Rotation matrix must be orthogonal")
        if not np.isclose(np.linalg.det(m), 1.0, rtol=0.0, atol=ORTHOGONALITY_TOLERANCE):
            raise ValueError(
                f"Rotation matrix must have determinant 1, got {np.linalg.det(m):g}"
            )
        m.setflags(write=False)
        self._matrix = m

    @property
    def matrix(self) -> npt.NDArray[np.float64]:
        """The underlying read-only 3x3 matrix."""
        return self._matrix

    @classmethod
    def identity(cls) -> Rotation:
        return cls(np.identity(3))

    @classmethod
    def rotation_x(cls, theta: float) -> Rotation:
        """Rotation by theta radians around the X axis."""
        if theta == 0.0:
            return cls.identity()
        c, s = math.cos(theta), math.sin(theta)
        return cls([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])

    @classmethod
    def rotation_y(cls, theta: float) -> Rotation:
        """Rotation by theta radians around the Y axis."""
        if theta == 0.0:
            return cls.identity()
        c, s = math.cos(theta), math.sin(theta)
        return cls([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])

    @classmethod
    def rotation_z(cls, theta: float) -> Rotation:
        """Rotation by theta radians around the Z axis."""
        if theta == 0.0:
            return cls.identity()
        c, s = math.cos(theta), math.sin(theta)
        return cls([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])

    def inverse(self) -> Rotation:
        # Orthogonal, so the transpose is the inverse
        return Rotation(self._matrix.T)

    def apply(self, v: Sequence[float]) -> Vector3:
        """Rotate a 3-vector, returning a plain tuple."""
        x, y, z = self._matrix @ np.asarray(v, dtype=np.float64)
        return (float(x), float(y), float(z))

    def __mul__(self, other: Rotation | Sequence[float]) -> Rotation | Vector3:
        if isinstance(other, Rotation):
            return Rotation(self._matrix @ other._matrix)
        return self.apply(other)

    def distance(self, other: Rotation) -> float:
        return matrix_distance(self._matrix, other._matrix)

    def is_close(self, other: Rotation, tolerance: float = 1e-12) -> bool:
        """Approximate equality using matrix_distance."""
        return self.distance(other) < tolerance

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Rotation):
            return NotImplemented
        return bool(np.array_equal(self._matrix, other._matrix))

    def __hash__(self) -> int:
        return hash(self._matrix.tobytes())

    def __repr__(self) -> str:
        rows = ", ".join(str([float(x) for x in row]) for row in self._matrix)
        return f"Rotation([{rows}])"
