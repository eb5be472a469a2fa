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

""" Triangle pair quadification.

Adjacent triangles are merged into quads by a greedy matching: every
interior edge gets a score that rates the quad formed by its two
triangles, and a triangle is merged with a neighbor only if they prefer
each other.

The result depends on traversal order. Faces are visited in halfedge
arena order, edges in face loop order, and ties are resolved in favor of
the edge found first.
"""

import logging

import meshtopo.linalg as linalg


logger = logging.getLogger(__name__)


DEFAULT_NORMAL_THRESHOLD = 0.9


def _is_triangle(halfedge):
    return halfedge.next.next.next is halfedge


def make_quad(left, right):
    """ Quad from a pair of twin halfedges.

    Parameters
    ----------
    left, right : Halfedge
        Twin halfedges of two triangles.

    Returns
    -------
    list[int] or None
        Vertex indices of the quad that replaces both triangles, oriented
        consistently with them. :obj:`None` if one of the faces is not a
        triangle.
    """
    if not (_is_triangle(left) and _is_triangle(right)):
        return None

    return [left._origin, right.next.next._origin,
            right._origin, left.next.next._origin]


def _triangle_normal(points, halfedge):
    """ Flat normal of the triangle that starts at `halfedge`.
    """
    p0 = points[halfedge._origin]
    p1 = points[halfedge.next._origin]
    p2 = points[halfedge.next.next._origin]

    return linalg.unit(linalg.cross(p1 - p0, p2 - p0))


def quad_score(mesh, left, right, normal_threshold=DEFAULT_NORMAL_THRESHOLD):
    """ Quality of a quad made of two triangles.

    Three criteria contribute up to one point each: the alignment of the
    two triangle normals, how close the quad corners are to right angles,
    and how close opposite quad sides are to being parallel.

    Parameters
    ----------
    mesh : Mesh
        Mesh instance.
    left, right : Halfedge
        Twin halfedges of two triangles.
    normal_threshold : float, optional
        Pairs whose normals have a smaller dot product get score zero.

    Returns
    -------
    float
        Score in :math:`[0, 1]` (0 is terrible, 1 is perfect).
    """
    quad = make_quad(left, right)

    if quad is None:
        return 0.0

    points = mesh.points
    score = linalg.dot(_triangle_normal(points, left),
                       _triangle_normal(points, right))

    if score < normal_threshold:
        return 0.0

    p = points[quad]
    a, b, c, d = (linalg.unit(p[(k + 1) % 4] - p[k]) for k in range(4))

    corners = (abs(linalg.dot(a, b)) + abs(linalg.dot(b, c)) +
               abs(linalg.dot(c, d)) + abs(linalg.dot(d, a)))

    score += 1.0 - 0.25 * corners
    score += 0.5 * abs(linalg.dot(a, c))
    score += 0.5 * abs(linalg.dot(b, d))

    return score * 0.33


def edge_scores(mesh, normal_threshold=DEFAULT_NORMAL_THRESHOLD):
    """ Quad scores of all interior edges.

    Parameters
    ----------
    mesh : Mesh
        Mesh instance.
    normal_threshold : float, optional
        See :func:`quad_score`.

    Returns
    -------
    dict
        Maps :class:`~meshtopo.hds.EdgeKey` to score. Every edge is scored
        once, from the first of its halfedges in arena order.
    """
    scores = dict()

    for h in mesh.halfedges:
        if h.boundary:
            continue

        key = h.key

        if key not in scores:
            scores[key] = quad_score(mesh, h, h.twin, normal_threshold)

    return scores


def best_connection(halfedge, scores):
    """ Preferred partner of a face.

    Parameters
    ----------
    halfedge : Halfedge
        The face loop of this halfedge is searched, starting at
        `halfedge`.
    scores : dict
        Edge scores as computed by :func:`edge_scores`.

    Returns
    -------
    int
        Index of the face across the interior edge with the strictly
        highest positive score, -1 if there is none.
    """
    best_score = 0.0
    best_face = -1

    h = halfedge

    while True:
        if not h.boundary:
            score = scores.get(h.key, 0.0)

            if score > best_score:
                best_score = score
                best_face = h.twin._face

        h = h.next

        if h is halfedge:
            return best_face


def quadify(mesh, normal_threshold=DEFAULT_NORMAL_THRESHOLD):
    """ Merge triangle pairs into quads.

    Parameters
    ----------
    mesh : Mesh
        Mesh instance, modified in place.
    normal_threshold : float, optional
        See :func:`quad_score`.

    Returns
    -------
    int
        Number of quads created.

    Note
    ----
    Faces that are not merged keep their relative order. The new quads are
    appended in the order the pairs were found. Vertices are not touched.
    """
    scores = edge_scores(mesh, normal_threshold)
    processed = set()
    pairs = []

    for halfedge in mesh.halfedges:
        if halfedge._face in processed:
            continue

        processed.add(halfedge._face)

        best_score = 0.0
        best_edge = None

        h = halfedge

        while True:
            if not h.boundary and h.twin._face not in processed:
                score = scores.get(h.key, 0.0)

                if (score > best_score and
                        best_connection(h.twin, scores) == h._face):
                    best_score = score
                    best_edge = h

            h = h.next

            if h is halfedge:
                break

        if best_edge is not None:
            processed.add(best_edge.twin._face)
            pairs.append(best_edge)

    quads = []
    remove = set()

    for h in pairs:
        quad = make_quad(h, h.twin)

        if quad is None:
            continue

        quads.append(quad)
        remove.update((h._face, h.twin._face))

    faces = [f.indices for f in mesh.faces if f._idx not in remove]
    faces.extend(quads)

    mesh.replace(faces=faces)

    logger.info('quadified %d triangle pairs (%d tris, %d quads, ' +
                '%d ngons)', len(quads), mesh.triangle_count,
                mesh.quad_count, mesh.ngon_count)

    return len(quads)
