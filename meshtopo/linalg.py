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

""" Basic vector math.

Non-vectorized helpers for vectors in 3-space and rigid transforms in
homogeneous coordinates. Transforms are plain :class:`~numpy.ndarray`
objects of shape (4, 4) acting on column vectors.
"""

import math
import numpy as np


EPS = 1e-12


def angle(v, w, a=None, deg=False):
    r""" Turning angle from `v` to `w`.

    The unsigned angle lies in [0, pi]. Passing a reference axis `a` gives
    it the sign of :math:`\mathbf{a} \cdot (\mathbf{v} \times \mathbf{w})`.

    Parameters
    ----------
    v, w : ~numpy.ndarray, shape (3, )
        Direction vectors.
    a : ~numpy.ndarray, shape (3, ), optional
        Reference axis for signed angles.
    deg : bool, optional
        Report degrees instead of radians.

    Returns
    -------
    float
        The angle, zero if either vector (nearly) vanishes. Zero length
        edges therefore never register as a turn.
    """
    lv = norm(v)
    lw = norm(w)

    if lv < EPS or lw < EPS:
        return 0.0

    cosine = clamp(float(v.dot(w)) / (lv * lw), -1.0, 1.0)
    result = math.acos(cosine)

    if deg:
        result = math.degrees(result)

    if a is not None and dot(a, cross(v, w)) < 0.0:
        return -result

    return result


def clamp(x, lo, hi):
    """ Restrict `x` to [`lo`, `hi`]. """
    assert lo <= hi
    return min(max(x, lo), hi)


def cross(u, v):
    """ Cross product of two 3-vectors, returned as a new array. """
    ux, uy, uz = u
    vx, vy, vz = v

    return np.array([uy*vz - uz*vy, uz*vx - ux*vz, ux*vy - uy*vx])


def dot(u, v):
    """ Scalar product of two 3-vectors as a Python float. """
    return float(u[0]*v[0] + u[1]*v[1] + u[2]*v[2])


def norm(u):
    """ Euclidean length of `u`. """
    return math.sqrt(u.dot(u))


def unit(u):
    """ Direction of `u`.

    Parameters
    ----------
    u : ~numpy.ndarray, shape (3, )
        Any vector.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        `u` scaled to unit length, or a zero vector of the same shape when
        `u` is shorter than :data:`EPS`. The input is never modified.
    """
    length = norm(u)

    if length < EPS:
        return np.zeros_like(u, dtype=float)

    return u / length


def rotate(x, a, phi, sinphi=None):
    r""" Rotate `x` about the unit axis `a`.

    Uses Rodrigues' formula. Positive angles rotate counter-clockwise when
    looking down the axis.

    Parameters
    ----------
    x : ~numpy.ndarray, shape (3, )
        Vector to rotate.
    a : ~numpy.ndarray, shape (3, )
        Unit rotation axis.
    phi : float
        Angle in radians, or :math:`\cos(\varphi)` if `sinphi` is given.
    sinphi : float, optional
        :math:`\sin(\varphi)`, saves the trigonometric calls when the
        cosine and sine are already known.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
    """
    if sinphi is None:
        c, s = math.cos(phi), math.sin(phi)
    else:
        c, s = phi, sinphi

    return c * x + (1.0 - c) * a.dot(x) * a + s * cross(a, x)


def look_rotation(forward, up=(0.0, 1.0, 0.0)):
    r""" Orientation frame.

    Rotation matrix whose third column points along `forward` and whose
    second column is the component of `up` orthogonal to it.

    Parameters
    ----------
    forward : array_like, shape (3, )
        Viewing direction, need not be normalized.
    up : array_like, shape (3, ), optional
        Reference up vector.

    Returns
    -------
    ~numpy.ndarray, shape (3, 3)
        Rotation matrix with columns right, up, forward.

    Note
    ----
    If `up` is parallel to `forward` another reference axis is used. The
    identity is returned for a vanishing `forward` vector.
    """
    z = unit(np.asarray(forward, dtype=float))

    if not z.any():
        return np.eye(3)

    x = cross(np.asarray(up, dtype=float), z)

    # Up vector (anti-)parallel to the viewing direction. Fall back to the
    # coordinate axis least aligned with forward.
    if norm(x) < 1e-9:
        axis = np.zeros(3)
        axis[np.argmin(np.abs(z))] = 1.0
        x = cross(axis, z)

    x = unit(x)
    y = cross(z, x)

    return np.column_stack((x, y, z))


def translate(offset):
    """ Translation matrix.

    Parameters
    ----------
    offset : array_like, shape (3, )
        Translation vector.

    Returns
    -------
    ~numpy.ndarray, shape (4, 4)
    """
    matrix = np.eye(4)
    matrix[:3, 3] = offset
    return matrix


def trs(position=(0.0, 0.0, 0.0), rotation=None, scale=(1.0, 1.0, 1.0)):
    """ Compose translation, rotation and scale.

    Parameters
    ----------
    position : array_like, shape (3, ), optional
        Translation vector.
    rotation : array_like, shape (3, 3), optional
        Rotation matrix, identity by default.
    scale : array_like, shape (3, ), optional
        Scale factors along the local axes.

    Returns
    -------
    ~numpy.ndarray, shape (4, 4)
        The matrix ``T @ R @ S``.
    """
    matrix = np.eye(4)

    if rotation is not None:
        matrix[:3, :3] = rotation

    matrix[:3, :3] = matrix[:3, :3] * np.asarray(scale, dtype=float)
    matrix[:3, 3] = position

    return matrix


def transform_points(matrix, points):
    """ Apply transform to points.

    Parameters
    ----------
    matrix : ~numpy.ndarray, shape (4, 4)
        Affine transform.
    points : array_like, shape (n, 3) or (3, )
        Point coordinates, one point per row.

    Returns
    -------
    ~numpy.ndarray
        Transformed points, same shape as `points`.
    """
    points = np.asarray(points, dtype=float)
    return points @ matrix[:3, :3].T + matrix[:3, 3]


def transform_vectors(matrix, vectors):
    """ Apply linear part of transform to direction vectors.

    Parameters
    ----------
    matrix : ~numpy.ndarray, shape (4, 4)
        Affine transform.
    vectors : array_like, shape (n, 3) or (3, )
        Direction vectors, one vector per row.

    Returns
    -------
    ~numpy.ndarray
        Transformed vectors, translation is ignored.
    """
    vectors = np.asarray(vectors, dtype=float)
    return vectors @ matrix[:3, :3].T
