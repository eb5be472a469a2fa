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

""" Preserve-topology import pipeline.

Turns an imported vertex/face payload into a canonical polygon mesh.
The payload is a mapping shaped like

.. code-block:: python

    {
        'name': 'crate_tri',
        'vertices': [{'position': (x, y, z), 'normal': (x, y, z)}, ...],
        'faces': [{'vertex_indices': [0, 1, 2]}, ...],
    }

Importers split vertices at every attribute seam. :func:`preserve` welds
them again, restores normals that went missing on import and optionally
merges triangle pairs into quads.
"""

import logging

import numpy as np

import meshtopo.linalg as linalg
import meshtopo.repair as repair
from meshtopo.hds import Mesh
from meshtopo.quadify import quadify as quadify_mesh


logger = logging.getLogger(__name__)


DEGENERATE_NORMAL_EPS = 1e-6


def _rows(data, name):
    if not data:
        return np.zeros((0, 3))

    array = np.array(data, dtype=float)

    if array.ndim != 2 or array.shape[1] != 3:
        raise ValueError(f'vertex {name} must be 3d vectors')

    return array


def _vertex_data(vertices):
    points = []
    normals = []

    for i, vertex in enumerate(vertices):
        try:
            points.append(vertex['position'])
            normals.append(vertex.get('normal', (0.0, 0.0, 0.0)))
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f'malformed vertex #{i}: {vertex!r}') from e

    points = _rows(points, 'positions')
    normals = _rows(normals, 'normals')

    length = np.linalg.norm(normals, axis=1)
    mask = length >= DEGENERATE_NORMAL_EPS
    normals[mask] /= length[mask, np.newaxis]
    normals[~mask] = 0.0

    return points, normals


def from_payload(payload):
    """ Mesh from an import payload.

    Parameters
    ----------
    payload : dict
        Mapping with keys ``'name'``, ``'vertices'`` and ``'faces'``.

    Returns
    -------
    Mesh
        The imported mesh. Normals are normalized, degenerate normals are
        set to zero.

    Raises
    ------
    ValueError
        If the payload is malformed.
    NonManifoldError
        If the faces contain a non-manifold edge.

    Note
    ----
    Faces with less than three vertices are dropped.
    """
    try:
        vertices = payload['vertices']
        faces = payload['faces']
    except (KeyError, TypeError) as e:
        raise ValueError('payload requires vertices and faces') from e

    points, normals = _vertex_data(vertices)

    indices = []

    for i, face in enumerate(faces):
        try:
            face = [int(v) for v in face['vertex_indices']]
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f'malformed face #{i}: {face!r}') from e

        if len(face) < 3:
            logger.warning('dropped face #%d with %d vertices', i, len(face))
            continue

        indices.append(face)

    return Mesh(points, indices, normals, name=payload.get('name'))


def preserve(payload, smoothing_angle=repair.DEFAULT_SMOOTHING_ANGLE,
             position_tolerance=repair.DEFAULT_POSITION_TOLERANCE,
             quadify=None):
    """ Canonical mesh from an import payload.

    Parameters
    ----------
    payload : dict
        See :func:`from_payload`.
    smoothing_angle : float, optional
        Normal angle in degrees below which coincident vertices are welded.
        Also the crease angle for meshes imported without normals.
    position_tolerance : float, optional
        Grid size for position matching.
    quadify : bool, optional
        Merge triangle pairs into quads. By default meshes are quadified
        if their name contains "tri".

    Returns
    -------
    Mesh
        The processed mesh.

    Note
    ----
    Some exporters write zero normals for open surfaces. If no imported
    normal is usable, flat normals are computed from the faces before
    welding and vertices are split along hard edges afterwards.
    """
    mesh = from_payload(payload)

    logger.info('importing %s: %d vertices, %d faces (%d tris, %d quads, ' +
                '%d ngons)', mesh.name, len(mesh.vertices), len(mesh.faces),
                mesh.triangle_count, mesh.quad_count, mesh.ngon_count)

    degenerate = not any(linalg.norm(n) >= DEGENERATE_NORMAL_EPS
                         for n in mesh.normals)

    if degenerate:
        logger.info('%s has no usable normals, computing face normals',
                    mesh.name)
        repair.resynthesize_normals(mesh, DEGENERATE_NORMAL_EPS)

    repair.weld(mesh, position_tolerance, smoothing_angle)

    if degenerate:
        repair.split_hard_edges(mesh, smoothing_angle)

    if quadify is None:
        quadify = 'tri' in (mesh.name or '').lower()

    if quadify:
        quadify_mesh(mesh)

    logger.info('imported %s', mesh)

    return mesh
