"""
Shared mesh fixtures.
"""

import numpy as np
import pytest

from meshtopo.hds import Mesh


def cube_soup():
    """Unit cube as triangle soup: 6 faces x 4 vertices, 12 triangles.

    Every face owns its four vertices, vertex normals are the outward
    face normals.
    """
    points, normals, faces = [], [], []

    for axis in range(3):
        for sign in (-1.0, 1.0):
            n = np.zeros(3)
            n[axis] = sign
            u = np.zeros(3)
            u[(axis + 1) % 3] = 1.0
            w = np.zeros(3)
            w[(axis + 2) % 3] = 1.0

            center = 0.5 + 0.5 * n
            corners = [center + 0.5 * (s * u + t * w)
                       for s, t in ((-1, -1), (1, -1), (1, 1), (-1, 1))]

            if sign < 0:
                corners.reverse()

            base = len(points)
            points.extend(corners)
            normals.extend([n] * 4)
            faces.extend([[base, base + 1, base + 2],
                          [base, base + 2, base + 3]])

    return np.array(points), faces, np.array(normals)


def grid(n, triangulate=False, normal=(0.0, 0.0, 1.0)):
    """n x n quad grid in the xy-plane, vertex (i, j) has index i + j(n+1).
    """
    points = [(i, j, 0.0) for j in range(n + 1) for i in range(n + 1)]
    faces = []

    for j in range(n):
        for i in range(n):
            a = i + j * (n + 1)
            b = a + 1
            c = b + n + 1
            d = a + n + 1

            if triangulate:
                faces.extend([[a, b, c], [a, c, d]])
            else:
                faces.append([a, b, c, d])

    normals = np.tile(normal, (len(points), 1))

    return Mesh(points, faces, normals)


@pytest.fixture
def cube():
    points, faces, normals = cube_soup()
    return Mesh(points, faces, normals, name='cube')


@pytest.fixture
def closed_cube():
    """Cube with 8 shared corners and zero normals."""
    points, faces, _ = cube_soup()
    keys = [tuple(p) for p in points]
    unique = list(dict.fromkeys(keys))
    remap = [unique.index(k) for k in keys]
    faces = [[remap[v] for v in f] for f in faces]

    return Mesh(np.array(unique), faces, name='closed_cube')


@pytest.fixture
def square():
    """Unit square profile made of two triangles."""
    points = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)]
    return Mesh(points, [[0, 1, 2], [0, 2, 3]], name='square')


@pytest.fixture
def annulus():
    """Square ring of four quads with an outer and an inner boundary loop."""
    points = [(0, 0, 0), (3, 0, 0), (3, 3, 0), (0, 3, 0),
              (1, 1, 0), (2, 1, 0), (2, 2, 0), (1, 2, 0)]
    faces = [[0, 1, 5, 4], [1, 2, 6, 5], [2, 3, 7, 6], [3, 0, 4, 7]]

    return Mesh(points, faces, name='annulus')


@pytest.fixture
def quad_grid():
    return grid(3)


@pytest.fixture
def tri_grid():
    return grid(2, triangulate=True)
