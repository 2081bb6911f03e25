"""
Unit tests for geometric primitives, decomposition and rigid transforms.
"""

import dataclasses

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from pcafit import IsoBox, Point, Segment, Tetrahedron, Triangle, decompose, transform_primitive
from pcafit.config import EPS


class TestConstruction:
    """Tests for primitive construction and validation."""

    def test_point_default_weight(self):
        """Points weigh 1 unless told otherwise."""
        assert Point([1.0, 2.0]).weight == 1.0
        assert Point([1.0, 2.0], weight=3).weight == 3.0

    @pytest.mark.parametrize("weight", [-1.0, np.nan, np.inf])
    def test_point_bad_weight(self, weight):
        """Negative or non-finite weights are rejected."""
        with pytest.raises(ValueError, match="weight"):
            Point([0.0, 0.0], weight=weight)

    def test_mixed_dimensions(self):
        """All coordinates of one primitive must share a dimension."""
        with pytest.raises(ValueError, match="mix dimensions"):
            Segment([0.0, 0.0], [1.0, 0.0, 0.0])
        with pytest.raises(ValueError, match="mix dimensions"):
            Triangle([0.0, 0.0], [1.0, 0.0], [0.0, 1.0, 0.0])

    def test_tetrahedron_requires_3d(self):
        """Tetrahedra only exist in 3D."""
        with pytest.raises(ValueError, match="3D"):
            Tetrahedron([0, 0], [1, 0], [0, 1], [1, 1])

    def test_box_normalizes_corners(self):
        """Opposite corners in any order give the same box."""
        box = IsoBox([2.0, 0.0, 5.0], [0.0, 1.0, 3.0])
        np.testing.assert_array_equal(box.min_corner, [0.0, 0.0, 3.0])
        np.testing.assert_array_equal(box.max_corner, [2.0, 1.0, 5.0])
        np.testing.assert_array_equal(box.center, [1.0, 0.5, 4.0])
        np.testing.assert_array_equal(box.half_extents, [1.0, 0.5, 1.0])

    def test_frozen(self):
        """Primitives are immutable."""
        segment = Segment([0.0, 0.0], [1.0, 0.0])
        with pytest.raises(dataclasses.FrozenInstanceError):
            segment.source = np.array([5.0, 5.0])


class TestMeasures:
    """Tests for measure, diameter, centroid and degeneracy."""

    def test_measures(self):
        """Length, area and volume of simple primitives."""
        assert Segment([0, 0], [3, 4]).measure == pytest.approx(5.0)
        assert Triangle([0, 0], [2, 0], [0, 2]).measure == pytest.approx(2.0)
        assert Tetrahedron([0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]).measure == pytest.approx(1 / 6)
        assert IsoBox([0, 0, 0], [1, 2, 3]).measure == pytest.approx(6.0)
        assert IsoBox([0, 0], [2, 3]).measure == pytest.approx(6.0)
        assert Point([1, 1]).measure == 0.0

    def test_intrinsic_dimension(self):
        """Boxes are full-dimensional in their ambient space."""
        assert Point([0, 0]).intrinsic_dimension == 0
        assert Segment([0, 0], [1, 0]).intrinsic_dimension == 1
        assert Triangle([0, 0, 0], [1, 0, 0], [0, 1, 0]).intrinsic_dimension == 2
        assert IsoBox([0, 0], [1, 1]).intrinsic_dimension == 2
        assert IsoBox([0, 0, 0], [1, 1, 1]).intrinsic_dimension == 3

    def test_centroids(self):
        """Centroids of uniform simplices are vertex averages."""
        tri = Triangle([0, 0], [3, 0], [0, 3])
        np.testing.assert_allclose(tri.centroid(), [1.0, 1.0])
        tet = Tetrahedron([0, 0, 0], [4, 0, 0], [0, 4, 0], [0, 0, 4])
        np.testing.assert_allclose(tet.centroid(), [1.0, 1.0, 1.0])

    def test_degenerate(self):
        """Zero length, area or volume is degenerate; points never are."""
        assert Segment([1, 1], [1, 1]).is_degenerate(EPS)
        assert Triangle([0, 0], [1, 1], [2, 2]).is_degenerate(EPS)
        assert Tetrahedron([0, 0, 0], [1, 0, 0], [0, 1, 0], [1, 1, 0]).is_degenerate(EPS)
        assert IsoBox([0, 0, 0], [1, 1, 0]).is_degenerate(EPS)
        assert not Point([0, 0], weight=0.0).is_degenerate(EPS)

    def test_small_but_valid(self):
        """Tiny primitives are fine as long as they are not flat."""
        assert not Triangle([0, 0], [1e-6, 0], [0, 1e-6]).is_degenerate(EPS)


class TestBoxBoundary:
    """Tests for box corners, edges and faces."""

    def test_counts_3d(self):
        """A cuboid has 8 corners, 12 edges and 6 faces (12 triangles)."""
        box = IsoBox([0, 0, 0], [1, 2, 3])
        assert len(list(box.corners())) == 8
        assert len(list(box.edges())) == 12
        assert len(list(box.faces())) == 12

    def test_counts_2d(self):
        """A rectangle has 4 corners and 4 edges."""
        box = IsoBox([0, 0], [1, 2])
        assert len(list(box.corners())) == 4
        assert len(list(box.edges())) == 4

    def test_edge_lengths(self):
        """Edges of a 1x2x3 box sum to 4 * (1 + 2 + 3)."""
        box = IsoBox([0, 0, 0], [1, 2, 3])
        assert sum(e.measure for e in box.edges()) == pytest.approx(24.0)

    def test_face_area(self):
        """Face triangles cover the surface area."""
        box = IsoBox([0, 0, 0], [1, 2, 3])
        assert sum(t.measure for t in box.faces()) == pytest.approx(22.0)

    def test_faces_need_3d(self):
        """Rectangles have no faces."""
        with pytest.raises(ValueError):
            list(IsoBox([0, 0], [1, 1]).faces())


class TestDecompose:
    """Tests for decompose() function."""

    @pytest.fixture
    def tetrahedron(self):
        return Tetrahedron([0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1])

    def test_none_keeps_primitive(self, tetrahedron):
        """No dimension tag leaves the primitive untouched."""
        assert list(decompose(tetrahedron)) == [tetrahedron]
        assert list(decompose(tetrahedron, 3)) == [tetrahedron]

    @pytest.mark.parametrize("dimension, kind, count", [
        (2, Triangle, 4),
        (1, Segment, 6),
        (0, Point, 4),
    ])
    def test_tetrahedron(self, tetrahedron, dimension, kind, count):
        """Tetrahedron faces, edges and vertices."""
        pieces = list(decompose(tetrahedron, dimension))
        assert len(pieces) == count
        assert all(isinstance(p, kind) for p in pieces)

    @pytest.mark.parametrize("dimension, count", [(2, 12), (1, 12), (0, 8)])
    def test_box(self, dimension, count):
        """Cuboid faces (as triangles), edges and corners."""
        box = IsoBox([0, 0, 0], [1, 1, 1])
        assert len(list(decompose(box, dimension))) == count

    def test_triangle_and_segment(self):
        """Triangle edges and segment endpoints."""
        tri = Triangle([0, 0], [1, 0], [0, 1])
        assert len(list(decompose(tri, 1))) == 3
        assert len(list(decompose(Segment([0, 0], [1, 0]), 0))) == 2

    def test_dimension_above_intrinsic(self):
        """A segment cannot be fitted as a surface."""
        with pytest.raises(ValueError, match="Cannot fit Segment"):
            list(decompose(Segment([0, 0], [1, 0]), 2))


class TestTransformPrimitive:
    """Tests for transform_primitive() function."""

    def test_translate_segment(self):
        """Translation moves every vertex."""
        moved = transform_primitive(Segment([0, 0], [1, 0]), translation=[2, 3])
        np.testing.assert_allclose(moved.source, [2, 3])
        np.testing.assert_allclose(moved.target, [3, 3])

    def test_rotate_triangle_3d(self):
        """scipy Rotation objects are applied to 3D primitives."""
        rotation = Rotation.from_euler('z', 90, degrees=True)
        moved = transform_primitive(Triangle([1, 0, 0], [0, 1, 0], [0, 0, 0]), rotation)
        np.testing.assert_allclose(moved.a, [0, 1, 0], atol=1e-12)
        np.testing.assert_allclose(moved.b, [-1, 0, 0], atol=1e-12)

    def test_point_keeps_weight(self):
        """Moving a point keeps its multiplicity."""
        moved = transform_primitive(Point([1, 2], weight=4.0), translation=[1, 1])
        assert moved.weight == 4.0

    def test_box_axis_permutation(self):
        """Boxes accept rotations that keep them axis-aligned."""
        R = np.array([[0.0, -1.0], [1.0, 0.0]])
        moved = transform_primitive(IsoBox([0, 0], [2, 1]), R)
        np.testing.assert_allclose(moved.min_corner, [-1, 0])
        np.testing.assert_allclose(moved.max_corner, [0, 2])

    def test_box_general_rotation(self):
        """A box cannot be rotated off its axes."""
        rotation = Rotation.from_euler('z', 30, degrees=True)
        with pytest.raises(ValueError, match="axis-aligned"):
            transform_primitive(IsoBox([0, 0, 0], [1, 1, 1]), rotation)

    def test_rotation_object_on_2d(self):
        """scipy Rotation objects are 3D only."""
        with pytest.raises(ValueError, match="3D"):
            transform_primitive(Segment([0, 0], [1, 0]), Rotation.identity())

    def test_non_orthogonal_matrix(self):
        """Scaling matrices are not rigid motions."""
        with pytest.raises(ValueError, match="orthogonal"):
            transform_primitive(Segment([0, 0], [1, 0]), 2 * np.eye(2))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
