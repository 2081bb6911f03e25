"""
Geometric primitives accepted by the fitting engine.

Primitives are immutable containers of float64 coordinates in 2D or 3D:

- Point: a (weighted) point, intrinsic dimension 0
- Segment: intrinsic dimension 1
- Triangle: intrinsic dimension 2 (in the plane or embedded in 3D)
- Tetrahedron: intrinsic dimension 3 (3D only)
- IsoBox: axis-aligned rectangle (2D) or cuboid (3D), full-dimensional

A primitive set can be fitted as a lower-dimensional mass distribution
(e.g. only the edges of a set of boxes); ``decompose`` breaks a primitive
into its boundary pieces of the requested dimension.
"""

from dataclasses import dataclass
from itertools import combinations
from typing import Iterator, Optional, Tuple

import numpy as np
from scipy.spatial.transform import Rotation

from .linalg import as_coordinates, triangle_measure, tetrahedron_measure


class Primitive:
    """Common interface of all primitive kinds."""

    #: Dimension of the shape itself (0 point, 1 curve, 2 surface, 3 solid)
    intrinsic_dimension: int = 0

    @property
    def vertices(self) -> Tuple[np.ndarray, ...]:
        raise NotImplementedError

    @property
    def ambient_dimension(self) -> int:
        """Dimension of the space the primitive lives in (2 or 3)."""
        return self.vertices[0].shape[0]

    @property
    def measure(self) -> float:
        """Length, area or volume; 0 for points."""
        return 0.0

    @property
    def diameter(self) -> float:
        """Largest distance between two vertices."""
        verts = self.vertices
        if len(verts) < 2:
            return 0.0
        return max(float(np.linalg.norm(p - q)) for p, q in combinations(verts, 2))

    def centroid(self) -> np.ndarray:
        """Center of mass of the (uniform density) primitive."""
        return np.mean(np.stack(self.vertices), axis=0)

    def is_degenerate(self, eps: float) -> bool:
        """
        True when the measure vanishes relative to the primitive's size.

        Points are never degenerate; their mass is the weight.
        """
        if self.intrinsic_dimension == 0:
            return False
        size = self.diameter
        return self.measure <= eps * size ** self.intrinsic_dimension

    def _check_same_dimension(self, *coords):
        dims = {c.shape[0] for c in coords}
        if len(dims) != 1:
            raise ValueError(
                f"{type(self).__name__} coordinates mix dimensions {sorted(dims)}"
            )


@dataclass(frozen=True, eq=False)
class Point(Primitive):
    """
    A point with a multiplicity.

    Attributes
    ----------
    p : np.ndarray
        Coordinates of shape (2,) or (3,).
    weight : float
        Multiplicity (mass), finite and >= 0. Default 1.
    """
    p: np.ndarray
    weight: float = 1.0

    intrinsic_dimension = 0

    def __post_init__(self):
        object.__setattr__(self, 'p', as_coordinates(self.p, "point"))
        weight = float(self.weight)
        if not np.isfinite(weight) or weight < 0:
            raise ValueError(f"Point weight must be finite and >= 0, got {self.weight}")
        object.__setattr__(self, 'weight', weight)

    @property
    def vertices(self):
        return (self.p,)

    def centroid(self) -> np.ndarray:
        return self.p.copy()


@dataclass(frozen=True, eq=False)
class Segment(Primitive):
    """Line segment between ``source`` and ``target``."""
    source: np.ndarray
    target: np.ndarray

    intrinsic_dimension = 1

    def __post_init__(self):
        object.__setattr__(self, 'source', as_coordinates(self.source, "source"))
        object.__setattr__(self, 'target', as_coordinates(self.target, "target"))
        self._check_same_dimension(self.source, self.target)

    @property
    def vertices(self):
        return (self.source, self.target)

    @property
    def measure(self) -> float:
        return float(np.linalg.norm(self.target - self.source))


@dataclass(frozen=True, eq=False)
class Triangle(Primitive):
    """Triangle with vertices ``a``, ``b``, ``c`` in 2D or 3D."""
    a: np.ndarray
    b: np.ndarray
    c: np.ndarray

    intrinsic_dimension = 2

    def __post_init__(self):
        for name in ('a', 'b', 'c'):
            object.__setattr__(self, name, as_coordinates(getattr(self, name), name))
        self._check_same_dimension(self.a, self.b, self.c)

    @property
    def vertices(self):
        return (self.a, self.b, self.c)

    @property
    def measure(self) -> float:
        return triangle_measure(self.a, self.b, self.c)


@dataclass(frozen=True, eq=False)
class Tetrahedron(Primitive):
    """Tetrahedron with vertices ``a``, ``b``, ``c``, ``d`` (3D only)."""
    a: np.ndarray
    b: np.ndarray
    c: np.ndarray
    d: np.ndarray

    intrinsic_dimension = 3

    def __post_init__(self):
        for name in ('a', 'b', 'c', 'd'):
            object.__setattr__(self, name, as_coordinates(getattr(self, name), name))
        self._check_same_dimension(self.a, self.b, self.c, self.d)
        if self.a.shape[0] != 3:
            raise ValueError(f"Tetrahedron requires 3D coordinates, got {self.a.shape}")

    @property
    def vertices(self):
        return (self.a, self.b, self.c, self.d)

    @property
    def measure(self) -> float:
        return tetrahedron_measure(self.a, self.b, self.c, self.d)


@dataclass(frozen=True, eq=False)
class IsoBox(Primitive):
    """
    Axis-aligned box given by two opposite corners.

    In 2D this is a rectangle, in 3D a cuboid. The corners are normalized
    so that ``min_corner <= max_corner`` componentwise.
    """
    min_corner: np.ndarray
    max_corner: np.ndarray

    def __post_init__(self):
        lo = as_coordinates(self.min_corner, "min_corner")
        hi = as_coordinates(self.max_corner, "max_corner")
        self._check_same_dimension(lo, hi)
        lo, hi = np.minimum(lo, hi), np.maximum(lo, hi)
        lo.setflags(write=False)
        hi.setflags(write=False)
        object.__setattr__(self, 'min_corner', lo)
        object.__setattr__(self, 'max_corner', hi)

    @property
    def intrinsic_dimension(self) -> int:
        return self.ambient_dimension

    @property
    def center(self) -> np.ndarray:
        return 0.5 * (self.min_corner + self.max_corner)

    @property
    def half_extents(self) -> np.ndarray:
        return 0.5 * (self.max_corner - self.min_corner)

    @property
    def vertices(self):
        return tuple(self.corners())

    @property
    def ambient_dimension(self) -> int:
        return self.min_corner.shape[0]

    @property
    def measure(self) -> float:
        return float(np.prod(self.max_corner - self.min_corner))

    @property
    def diameter(self) -> float:
        return float(np.linalg.norm(self.max_corner - self.min_corner))

    def centroid(self) -> np.ndarray:
        return self.center

    def corners(self) -> Iterator[np.ndarray]:
        """
        Yield the 2^d corners.

        Corner ``k`` takes ``max_corner`` on axis ``i`` when bit ``i`` of
        ``k`` is set.
        """
        d = self.ambient_dimension
        for k in range(2 ** d):
            yield np.array([
                self.max_corner[i] if (k >> i) & 1 else self.min_corner[i]
                for i in range(d)
            ])

    def edges(self) -> Iterator[Segment]:
        """Yield the box edges (4 in 2D, 12 in 3D)."""
        corners = list(self.corners())
        d = self.ambient_dimension
        for k in range(2 ** d):
            for i in range(d):
                if not (k >> i) & 1:
                    yield Segment(corners[k], corners[k | (1 << i)])

    def faces(self) -> Iterator[Triangle]:
        """Yield the six faces of a 3D box, each split into two triangles."""
        if self.ambient_dimension != 3:
            raise ValueError("faces() is only defined for 3D boxes")
        corners = list(self.corners())
        for axis in range(3):
            u, v = [i for i in range(3) if i != axis]
            for side in (0, 1):
                base = side << axis
                c00 = corners[base]
                c10 = corners[base | (1 << u)]
                c01 = corners[base | (1 << v)]
                c11 = corners[base | (1 << u) | (1 << v)]
                yield Triangle(c00, c10, c11)
                yield Triangle(c00, c11, c01)


def decompose(primitive: Primitive, dimension: Optional[int] = None) -> Iterator[Primitive]:
    """
    Break a primitive into boundary pieces of the given dimension.

    Parameters
    ----------
    primitive : Primitive
        Primitive to decompose.
    dimension : int, optional
        Target dimension (0 to the primitive's intrinsic dimension).
        None keeps the primitive as is.

    Yields
    ------
    Primitive
        Pieces whose intrinsic dimension equals ``dimension``.
    """
    own = primitive.intrinsic_dimension
    if dimension is None or dimension == own:
        yield primitive
        return

    if not 0 <= dimension < own:
        raise ValueError(
            f"Cannot fit {type(primitive).__name__} (dimension {own}) "
            f"as a {dimension}-dimensional set"
        )

    if dimension == 0:
        for v in primitive.vertices:
            yield Point(v)
        return

    if isinstance(primitive, IsoBox):
        if dimension == 1:
            yield from primitive.edges()
        else:
            yield from primitive.faces()
    elif isinstance(primitive, Tetrahedron):
        verts = primitive.vertices
        for combo in combinations(verts, dimension + 1):
            yield (Segment if dimension == 1 else Triangle)(*combo)
    elif isinstance(primitive, Triangle):
        for p, q in combinations(primitive.vertices, 2):
            yield Segment(p, q)
    else:
        raise ValueError(f"Unsupported primitive {type(primitive).__name__}")


def _rotation_matrix(rotation, dimension: int) -> np.ndarray:
    if isinstance(rotation, Rotation):
        if dimension != 3:
            raise ValueError("scipy Rotation objects only apply to 3D primitives")
        return rotation.as_matrix()

    matrix = np.asarray(rotation, dtype=np.float64)
    if matrix.shape != (dimension, dimension):
        raise ValueError(f"Expected rotation of shape ({dimension}, {dimension}), got {matrix.shape}")
    if not np.allclose(matrix.T @ matrix, np.eye(dimension), atol=1e-9):
        raise ValueError("Rotation matrix is not orthogonal")
    return matrix


def transform_primitive(primitive: Primitive, rotation=None, translation=None) -> Primitive:
    """
    Apply the rigid motion ``x -> R x + t`` to a primitive.

    Parameters
    ----------
    primitive : Primitive
        Primitive to move.
    rotation : scipy.spatial.transform.Rotation or array_like, optional
        3D Rotation, or an orthogonal (d, d) matrix. Identity if None.
    translation : array_like, optional
        Translation of shape (d,). Zero if None.

    Returns
    -------
    Primitive
        New primitive of the same kind. Boxes only accept rotations that
        keep them axis-aligned (signed axis permutations).
    """
    d = primitive.ambient_dimension
    R = np.eye(d) if rotation is None else _rotation_matrix(rotation, d)
    t = np.zeros(d) if translation is None else np.asarray(translation, dtype=np.float64)

    def move(x):
        return R @ x + t

    if isinstance(primitive, Point):
        return Point(move(primitive.p), primitive.weight)
    if isinstance(primitive, IsoBox):
        if not np.allclose(np.abs(R), np.round(np.abs(R)), atol=1e-9):
            raise ValueError("Rotation does not keep the box axis-aligned")
        return IsoBox(move(primitive.min_corner), move(primitive.max_corner))
    return type(primitive)(*(move(v) for v in primitive.vertices))

