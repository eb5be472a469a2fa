# Copyright 2024, m3shware
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING
# FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
# IN THE SOFTWARE.

""" Geometric mesh traits.

Convenience functions to compute common and often used geometric mesh
traits like vertex and face normals, etc.
"""

import numpy as np

import meshtopo.linalg as linalg


def bounds(points):
    r""" Bounding box vertices.

    Corner vertices of the axis-aligned bounding box.

    Parameters
    ----------
    points : array_like, shape (n, k)
        Coordinates of :math:`n` points in :math:`\mathbb{R}^k`,
        one point per row.

    Returns
    -------
    a : ~numpy.ndarray
        Holds the minimum value for each dimension.
    b : ~numpy.ndarray
        Holds the maximum value for each dimension.
    """
    return np.min(points, axis=0), np.max(points, axis=0)


def face_normal(face, points=None):
    """ Face normal.

    Unit normal of the plane spanned by the first three face vertices.
    Faces are assumed to be (nearly) planar.

    Parameters
    ----------
    face : Face
        Face of a mesh.
    points : array_like, shape (n, 3), optional
        Vertex coordinates to use instead of the mesh coordinates.

    Returns
    -------
    ~numpy.ndarray, shape (3, ) or None
        Unit normal vector. :obj:`None` for faces with less than three
        vertices or vanishing area.
    """
    if len(face) < 3:
        return None

    if points is None:
        points = face._mesh._points

    p0, p1, p2 = (points[v] for v in face._verts[:3])
    normal = linalg.cross(p1 - p0, p2 - p0)
    length = linalg.norm(normal)

    if length < linalg.EPS:
        return None

    return normal / length


def face_normals(mesh, points=None):
    """ Face normals.

    Parameters
    ----------
    mesh : Mesh
        Mesh instance.
    points : array_like, shape (n, 3), optional
        Vertex coordinates to use instead of the mesh coordinates.

    Returns
    -------
    list
        Unit normal per face, :obj:`None` entries for degenerate faces.
    """
    return [face_normal(f, points) for f in mesh.faces]


def vertex_normals(points, triangles):
    """ Area weighted vertex normals of a triangle soup.

    Every triangle contributes its unnormalized normal, i.e., its normal
    scaled by twice its area, to each of its corners.

    Parameters
    ----------
    points : array_like, shape (n, 3)
        Vertex coordinates.
    triangles : array_like, shape (m, 3)
        Vertex indices per triangle.

    Returns
    -------
    ~numpy.ndarray, shape (n, 3)
        Unit vertex normals. Vertices without incident triangle of
        positive area get a zero normal.
    """
    points = np.asarray(points, dtype=float)
    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    normals = np.zeros_like(points)

    if len(triangles):
        a, b, c = (points[triangles[:, k]] for k in range(3))
        weighted = np.cross(b - a, c - a)

        for k in range(3):
            np.add.at(normals, triangles[:, k], weighted)

    length = np.linalg.norm(normals, axis=1)
    mask = length > linalg.EPS
    normals[mask] /= length[mask, np.newaxis]
    normals[~mask] = 0.0

    return normals