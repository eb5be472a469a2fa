"""
Tests for the halfedge kernel.
"""

import logging

import numpy as np
import pytest

from meshtopo.hds import EdgeKey, Mesh, NonManifoldError, TopologyError
from meshtopo.iterators import boundary, faces, halfedges, verts

from conftest import grid


def test_edge_key_is_unordered():
    assert EdgeKey(3, 7) == EdgeKey(7, 3)
    assert hash(EdgeKey(3, 7)) == hash(EdgeKey(7, 3))
    assert EdgeKey(3, 7) != EdgeKey(3, 8)
    assert len({EdgeKey(1, 2), EdgeKey(2, 1), EdgeKey(2, 3)}) == 2


def test_build_invariants(quad_grid, tri_grid, cube, annulus):
    for mesh in (quad_grid, tri_grid, cube, annulus):
        mesh._check()

        for h in mesh.halfedges:
            assert h.next.prev is h
            assert h.prev.next is h
            assert h.twin is None or h.twin.twin is h
            assert h._compute_loop_len() == len(h.face)


def test_halfedge_layout(square):
    # Halfedges are stored face by face in winding order.
    assert len(square.halfedges) == 6
    assert [h.origin.index for h in square.halfedges] == [0, 1, 2, 0, 2, 3]
    assert [h.target.index for h in square.halfedges] == [1, 2, 0, 2, 3, 0]

    diagonal = square.halfedges[2]
    assert diagonal.twin is square.halfedges[3]
    assert not diagonal.boundary
    assert square.faces[1].halfedge is square.halfedges[3]


def test_counts(square, quad_grid, annulus):
    assert np.array_equal(square.face_counts, [2, 1, 2, 1])
    assert square.vertices[0].face_count == 2
    assert square.triangle_count == 2
    assert square.quad_count == 0

    assert quad_grid.quad_count == 9
    assert quad_grid.size == (16, 24, 9)

    mesh = Mesh([(0, 0, 0), (1, 0, 0), (2, 1, 0), (1, 2, 0), (0, 1, 0)],
                [[0, 1, 2, 3, 4]])
    assert mesh.ngon_count == 1
    assert annulus.size == (8, 12, 4)


def test_boundary_edges(square, closed_cube, annulus):
    assert len(square.boundary_edges()) == 4
    assert closed_cube.boundary_edges() == []
    assert len(annulus.boundary_edges()) == 8


def test_adjacent_boundary(quad_grid):
    h = quad_grid.halfedges[0]
    assert (h.origin.index, h.target.index) == (0, 1)

    nxt = h.adjacent_boundary()
    assert nxt.boundary
    assert (nxt.origin.index, nxt.target.index) == (1, 2)

    prev = h.adjacent_boundary(reverse=True)
    assert prev.boundary
    assert (prev.origin.index, prev.target.index) == (4, 0)


def test_non_manifold_edge():
    points = np.eye(4, 3).tolist() + [(1, 1, 1)]
    faces = [[0, 1, 2], [1, 0, 3], [0, 1, 4]]

    with pytest.raises(NonManifoldError):
        Mesh(points, faces)

    assert issubclass(NonManifoldError, TopologyError)


def test_replace_is_atomic(square):
    halfs = square.halfedges
    bad = [[0, 1, 2], [1, 0, 3], [0, 1, 3]]

    with pytest.raises(NonManifoldError):
        square.replace(faces=bad)

    assert square.halfedges is halfs
    assert [f.indices for f in square.faces] == [[0, 1, 2], [0, 2, 3]]
    square._check()


def test_replace_vertices(square):
    square.replace(points=[(0, 0, 0), (2, 0, 0), (2, 2, 0)],
                   faces=[[0, 1, 2]])

    assert len(square.vertices) == 3
    assert square.normals.shape == (3, 3)
    assert square.triangle_count == 1
    square._check()


def test_invalid_faces():
    points = [(0, 0, 0), (1, 0, 0), (0, 1, 0)]

    with pytest.raises(ValueError):
        Mesh(points, [[0, 1]])

    with pytest.raises(IndexError):
        Mesh(points, [[0, 1, 3]])

    with pytest.raises(ValueError):
        Mesh([(0, 0), (1, 0)], [])

    with pytest.raises(ValueError):
        Mesh(None, [[0, 1, 2]])


def test_array_input():
    points = np.array([(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)], float)
    faces = np.array([[0, 1, 2], [0, 2, 3]])

    mesh = Mesh(points, faces)

    assert mesh.triangle_count == 2
    assert mesh.faces[1].indices == [0, 2, 3]
    assert all(isinstance(v, int) for v in mesh.faces[1].indices)
    mesh._check()

    mesh.replace(faces=np.array([[0, 1, 2, 3]]))
    assert mesh.quad_count == 1


def test_confirm_after_face_mutation(square):
    square.faces[1]._verts = [0, 3, 2]

    # The flipped face disagrees with its neighbor along the diagonal.
    # Both halfedges run from 2 to 0 and still pair up by edge key.
    square.confirm()
    square._check()
    assert square.faces[1].halfedge.index == 3


def test_vertex_properties(square):
    v = square.vertices[2]
    v.point = (1.0, 2.0, 0.0)

    assert np.allclose(square.points[2], (1.0, 2.0, 0.0))
    assert np.allclose(np.asarray(v), (1.0, 2.0, 0.0))
    assert v.boundary
    assert not v.isolated
    assert np.allclose(square.points[v], v.point)


def test_copy(quad_grid):
    other = quad_grid.copy()
    other.points[0] = (5.0, 5.0, 5.0)

    assert not np.allclose(quad_grid.points[0], other.points[0])
    assert other.size == quad_grid.size


def test_iterators(quad_grid, square):
    center = quad_grid.vertices[5]

    assert sorted(v.index for v in verts(center)) == [1, 4, 6, 9]
    assert len(list(halfedges(center))) == 4
    assert sorted(f.index for f in faces(center)) == [0, 1, 3, 4]
    assert [v.index for v in verts(quad_grid.faces[4])] == [5, 6, 10, 9]

    loop = list(boundary(square.halfedges[0]))
    assert len(loop) == 4
    assert all(h.boundary for h in loop)


def test_smoothing_groups_square(square):
    groups = square.boundary_smoothing_groups(45.0)

    assert len(groups) == 4

    for k, group in enumerate(groups):
        assert len(group) == 2
        # Consecutive groups share their corner halfedge.
        assert group[-1] is groups[(k + 1) % 4][0]


def test_smoothing_groups_without_corners(square):
    groups = square.boundary_smoothing_groups(100.0)

    assert len(groups) == 1
    assert len(groups[0]) == 5
    assert groups[0][0] is groups[0][-1]


def test_smoothing_groups_merge_across_start():
    # Boundary walk starts in the middle of the straight bottom run.
    points = [(0, 0, 0), (1, 0, 0), (2, 0, 0), (2, 1, 0), (0, 1, 0)]
    mesh = Mesh(points, [[1, 2, 3, 4, 0]])

    groups = mesh.boundary_smoothing_groups(45.0)

    assert len(groups) == 4
    assert [h.origin.index for h in groups[-1]] == [0, 1, 2]
    assert [h.origin.index for h in groups[0]] == [2, 3]


def test_smoothing_groups_all_loops(annulus):
    groups = annulus.boundary_smoothing_groups(45.0)

    assert len(groups) == 8
    origins = {h.origin.index for g in groups for h in g}
    assert origins == set(range(8))


def test_smoothing_groups_closed_mesh(closed_cube):
    assert closed_cube.boundary_smoothing_groups() is None


def test_smoothing_groups_custom_points(square):
    # Collapsing the corner turn of vertex 1 merges two groups.
    points = square.points.copy()
    points[1] = (1.0, 0.0, 0.0)
    points[2] = (2.0, 0.0, 0.0)

    groups = square.boundary_smoothing_groups(45.0, points=points)
    assert len(groups) < 4


def test_larger_grid_halfedge_count():
    mesh = grid(5, triangulate=True)

    assert len(mesh.halfedges) == 3 * 50
    assert len(mesh.boundary_edges()) == 20
    mesh._check()


def test_boundary_inconsistency_is_logged(caplog, square):
    # Break the boundary loop by hand: halfedge 1 becomes its own
    # successor and predecessor.
    caplog.set_level(logging.ERROR)
    h = square.halfedges[1]
    h._next, h._prev = h._idx, h._idx

    assert square.boundary_smoothing_groups(45.0) is None
    assert 'boundary loop inconsistency' in caplog.text
