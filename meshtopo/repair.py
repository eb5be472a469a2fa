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

""" Topology repair.

Canonicalization of imported polygon soups. Importers usually duplicate
vertices along UV seams and hard edges; :func:`weld` merges vertices that
share a position and a similar normal. Meshes imported without usable
normals get flat normals from :func:`resynthesize_normals` and their
vertices are split along sharp creases by :func:`split_hard_edges`.

All functions modify the mesh in place. The halfedge arena is rebuilt
once per call, previously obtained halfedge indices are invalid
afterwards.
"""

import logging
import math

import numpy as np

import meshtopo.linalg as linalg
import meshtopo.traits as traits


logger = logging.getLogger(__name__)


DEFAULT_POSITION_TOLERANCE = 1e-4
DEFAULT_SMOOTHING_ANGLE = 80.0
DEFAULT_HARD_ANGLE = 30.0


def _position_key(point, tolerance):
    """ Hashable grid cell of a point.
    """
    if tolerance <= 0.0:
        return tuple(float(x) for x in point)

    return tuple(int(x) for x in np.round(point / tolerance))


def _collapse(face):
    """ Remove cyclically repeated vertex indices from a face. """
    return [v for i, v in enumerate(face) if v != face[i - 1]]


def weld(mesh, position_tolerance=DEFAULT_POSITION_TOLERANCE,
         smoothing_angle=DEFAULT_SMOOTHING_ANGLE):
    """ Merge coincident vertices with similar normals.

    Vertices are grouped by their position rounded to integer multiples of
    `position_tolerance`. Within a position group, vertices are assigned
    first-fit to normal groups: a vertex joins the first group whose
    representative (its first member) has a normal within
    `smoothing_angle` degrees, otherwise it starts a new group. Every
    normal group becomes a single vertex.

    Parameters
    ----------
    mesh : Mesh
        Mesh instance, modified in place.
    position_tolerance : float, optional
        Grid size for position matching. Positions have to be identical if
        the tolerance is not positive.
    smoothing_angle : float, optional
        Maximum angle in degrees between the normals of merged vertices.

    Returns
    -------
    ~numpy.ndarray
        Index of the new vertex for each old vertex.

    Note
    ----
    A merged vertex is placed at the position of its group's
    representative. Its normal is the normalized sum of the member normals
    (zero if the sum vanishes). Vertices without partner keep position and
    normal unchanged.

    Repeated corners are removed from the remapped faces. Faces left with
    less than three corners are dropped with a warning.
    """
    cos_threshold = math.cos(math.radians(smoothing_angle))
    points = mesh.points
    normals = mesh.normals

    groups = dict()

    for i, p in enumerate(points):
        groups.setdefault(_position_key(p, position_tolerance), []).append(i)

    remap = np.empty(len(points), dtype=np.int64)
    new_points = []
    new_normals = []

    for group in groups.values():
        if len(group) == 1:
            remap[group[0]] = len(new_points)
            new_points.append(points[group[0]])
            new_normals.append(normals[group[0]])
            continue

        smooth_groups = []

        for i in group:
            for smooth_group in smooth_groups:
                rep = smooth_group[0]

                if linalg.dot(normals[i], normals[rep]) >= cos_threshold:
                    smooth_group.append(i)
                    break
            else:
                smooth_groups.append([i])

        for smooth_group in smooth_groups:
            remap[smooth_group] = len(new_points)
            new_points.append(points[smooth_group[0]])
            new_normals.append(linalg.unit(np.sum(normals[smooth_group],
                                                  axis=0)))

    faces = []

    for f in mesh.faces:
        face = _collapse(remap[f.indices].tolist())

        if len(face) < 3:
            logger.warning('dropped degenerate face #%d after welding: %r',
                           f.index, face)
            continue

        faces.append(face)

    mesh.replace(points=np.reshape(new_points, (-1, 3)), faces=faces,
                 normals=np.reshape(new_normals, (-1, 3)))

    logger.info('welded vertices: %d -> %d (merged %d duplicates)',
                len(remap), len(new_points), len(remap) - len(new_points))

    return remap


def resynthesize_normals(mesh, eps=1e-6):
    """ Replace degenerate vertex normals.

    Each vertex normal of length less than `eps` is replaced by the
    normalized average of the flat normals of its incident faces.

    Parameters
    ----------
    mesh : Mesh
        Mesh instance, normals are modified in place.
    eps : float, optional
        Length threshold for degenerate normals.

    Returns
    -------
    int
        Number of vertices that received a new normal.
    """
    normals = traits.face_normals(mesh)
    fixed = 0

    for v in mesh.vertices:
        if linalg.norm(v.normal) >= eps:
            continue

        acc = [normals[f._idx] for f in v._fiter()
               if normals[f._idx] is not None]

        if not acc:
            logger.debug('no face normal available for %r', v)
            continue

        normal = linalg.unit(np.mean(acc, axis=0))

        if linalg.norm(normal) > 0.0:
            v.normal = normal
            fixed += 1

    logger.info('resynthesized %d of %d vertex normals', fixed,
                len(mesh.vertices))

    return fixed


def _hard_edges(edge_faces, normals, cos_threshold):
    """ Set of edges with a pair of dissimilar incident faces.
    """
    hard = set()

    for key, faces in edge_faces.items():
        for i in range(len(faces) - 1):
            for j in range(i + 1, len(faces)):
                if not _similar(normals, faces[i], faces[j], cos_threshold):
                    hard.add(key)
                    break

            if key in hard:
                break

    return hard


def _similar(normals, f, g, cos_threshold):
    n = normals[f]
    m = normals[g]

    if n is None or m is None:
        return False

    return linalg.dot(n, m) >= cos_threshold


def _face_groups(vertex, edge_faces, hard, normals, cos_threshold):
    """ Partition the incident faces of a vertex.

    Connected components of the faces around `vertex`, connected via
    edges incident to the vertex that are not hard. A component grows
    from its seed, the remaining face of lowest index, and only admits
    faces with a normal similar to the seed's.
    """
    remaining = sorted(f._idx for f in vertex._fiter())
    groups = []

    while remaining:
        seed = remaining.pop(0)
        group = [seed]
        stack = [seed]

        while stack:
            face = vertex._mesh.faces[stack.pop()]

            for h in face._hiter():
                if vertex._idx not in (h._origin, h.next._origin):
                    continue

                key = h.key

                if key in hard:
                    continue

                for g in edge_faces[key]:
                    if g in remaining and _similar(normals, seed, g,
                                                   cos_threshold):
                        remaining.remove(g)
                        group.append(g)
                        stack.append(g)

        groups.append(sorted(group))

    return groups


def split_hard_edges(mesh, hard_angle=DEFAULT_HARD_ANGLE):
    """ Split vertices along hard edges.

    An edge is hard if two of its faces have flat normals that differ by
    more than `hard_angle` degrees. The faces around every vertex are
    partitioned into groups that are connected across soft edges and one
    vertex is emitted per group. The normal of a new vertex is the
    normalized average of its group's face normals.

    Parameters
    ----------
    mesh : Mesh
        Mesh instance, modified in place.
    hard_angle : float, optional
        Crease angle in degrees.

    Returns
    -------
    list[list[int]]
        New vertex indices for the corners of each face.

    Note
    ----
    Faces with less than three vertices or vanishing area have no normal.
    All their edges count as hard. Isolated vertices are dropped.
    """
    cos_threshold = math.cos(math.radians(hard_angle))
    normals = traits.face_normals(mesh)

    for f, n in enumerate(normals):
        if n is None:
            logger.debug('face #%d is degenerate, no normal', f)

    edge_faces = dict()

    for h in mesh.halfedges:
        faces = edge_faces.setdefault(h.key, [])

        if h._face not in faces:
            faces.append(h._face)

    hard = _hard_edges(edge_faces, normals, cos_threshold)

    new_points = []
    new_normals = []
    corner = dict()

    for v in mesh.vertices:
        for group in _face_groups(v, edge_faces, hard, normals,
                                  cos_threshold):
            acc = [normals[f] for f in group if normals[f] is not None]
            normal = linalg.unit(np.mean(acc, axis=0)) if acc else None

            if normal is None or linalg.norm(normal) == 0.0:
                normal = v.normal

            for f in group:
                corner[v._idx, f] = len(new_points)

            new_points.append(v.point)
            new_normals.append(normal)

    faces = [[corner[v, f._idx] for v in f.indices] for f in mesh.faces]

    count = len(mesh.vertices)
    mesh.replace(points=np.reshape(new_points, (-1, 3)), faces=faces,
                 normals=np.reshape(new_normals, (-1, 3)))

    logger.info('split vertices for hard edges: %d -> %d (created %d ' +
                'vertices at %g degrees, %d hard edges)', count,
                len(new_points), len(new_points) - count, hard_angle,
                len(hard))

    return faces
