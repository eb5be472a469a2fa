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

""" Profile extrusion.

A profile mesh is swept along a sequence of affine transforms. The result
consists of

    - optional start and end caps, copies of the profile faces placed at
      the first and the last transform,
    - side walls, one strip of quads per boundary smoothing group of the
      profile and per pair of consecutive transforms.

Smoothing groups do not share vertices. Hard corners of the profile
therefore get split normals on the side walls.
"""

import logging
from collections import namedtuple

import numpy as np

import meshtopo.linalg as linalg
import meshtopo.traits as traits
from meshtopo.paths import Knot


logger = logging.getLogger(__name__)


DEFAULT_SMOOTHING_ANGLE = 45.0

# Largest vertex count addressable with 16 bit indices.
MAX_UINT16_VERTICES = np.iinfo(np.uint16).max


class ExtrusionSettings(namedtuple('ExtrusionSettings',
                                   ['build_start_cap', 'build_end_cap',
                                    'flip_normals', 'uv_tiling',
                                    'uv_offset'],
                                   defaults=(True, True, False, (1.0, 1.0),
                                             (0.0, 0.0)))):
    """ Extrusion options.

    Attributes
    ----------
    build_start_cap : bool
        Place a copy of the profile faces at the first transform.
    build_end_cap : bool
        Place a copy of the profile faces at the last transform.
    flip_normals : bool
        Reverse the orientation of all generated triangles.
    uv_tiling : (float, float)
        Scale factors for side wall texture coordinates.
    uv_offset : (float, float)
        Offset added to side wall texture coordinates after scaling.
    """

    __slots__ = ()

    @classmethod
    def default(cls):
        """ Both caps, unflipped, unit tiling and zero offset.
        """
        return cls()


class ExtrudedMesh:
    """ Triangle mesh buffers.

    Parameters
    ----------
    points : ~numpy.ndarray, shape (n, 3)
        Vertex positions.
    triangles : ~numpy.ndarray, shape (m, 3)
        Vertex indices, ``uint16`` or ``uint32``.
    uvs : ~numpy.ndarray, shape (n, 2)
        Texture coordinates.
    normals : ~numpy.ndarray, shape (n, 3)
        Vertex normals.
    bounds : (~numpy.ndarray, ~numpy.ndarray)
        Minimum and maximum corner of the bounding box.
    """

    def __init__(self, points, triangles, uvs, normals, bounds):
        self.points = points
        self.triangles = triangles
        self.uvs = uvs
        self.normals = normals
        self.bounds = bounds

    def __repr__(self):
        return (f'ExtrudedMesh({self.vertex_count} vertices, ' +
                f'{self.triangle_count} triangles, ' +
                f'{self.index_format} bit indices)')

    @property
    def vertex_count(self):
        return len(self.points)

    @property
    def triangle_count(self):
        return len(self.triangles)

    @property
    def index_format(self):
        """ Index width in bits, 16 or 32.

        :type: int
        """
        return 8 * self.triangles.dtype.itemsize


def _fan(indices):
    """ Fan triangulation of a polygon.
    """
    return [(indices[0], indices[k], indices[k + 1])
            for k in range(1, len(indices) - 1)]


def extrude_groups(profile, segments, groups, settings=None, uvs=None):
    """ Extrude a profile along transforms.

    Parameters
    ----------
    profile : Mesh
        Profile mesh, usually a planar polygon in the xy-plane.
    segments : sequence
        Affine 4x4 transforms, one profile copy each.
    groups : list[list[Halfedge]] or None
        Boundary smoothing groups of the profile. Only caps are built if
        this is empty or :obj:`None`.
    settings : ExtrusionSettings, optional
        Extrusion options, :meth:`ExtrusionSettings.default` if not given.
    uvs : array_like, shape (n, 2), optional
        Texture coordinates of the profile vertices used for the caps.

    Returns
    -------
    ExtrudedMesh or None
        The extruded mesh, :obj:`None` if there are no segments.

    Note
    ----
    The side wall vertex of group edge `be` in segment `xe` has texture
    coordinates :math:`(xe, v)` where `v` is the distance travelled along
    the transformed group up to that vertex. Tiling and offset are applied
    to these coordinates.
    """
    if settings is None:
        settings = ExtrusionSettings.default()

    if len(segments) == 0:
        logger.debug('no extrusion segments, nothing to extrude')
        return None

    points = profile.points

    if uvs is None:
        uvs = np.zeros((len(points), 2))
    else:
        uvs = np.asarray(uvs, dtype=float)

    fans = [t for f in profile.faces for t in _fan(f.indices)]

    vertices = []
    coords = []
    triangles = []
    offset = 0

    for enabled, matrix, start in ((settings.build_start_cap, segments[0],
                                    True),
                                   (settings.build_end_cap, segments[-1],
                                    False)):
        if not enabled:
            continue

        vertices.append(linalg.transform_points(matrix, points))
        coords.append(uvs)

        for a, b, c in fans:
            if settings.flip_normals:
                b, c = c, b

            if start:
                triangles.append((a + offset, b + offset, c + offset))
            else:
                triangles.append((a + offset, c + offset, b + offset))

        offset += len(points)

    tiling = np.asarray(settings.uv_tiling, dtype=float)
    uv_offset = np.asarray(settings.uv_offset, dtype=float)
    last = len(segments) - 1

    for group in groups or []:
        origins = [h._origin for h in group]
        count = len(origins)

        for xe, matrix in enumerate(segments):
            row = linalg.transform_points(matrix, points[origins])
            steps = np.linalg.norm(np.diff(row, axis=0), axis=1)
            v = np.concatenate(([0.0], np.cumsum(steps)))
            u = np.full(count, float(xe))

            vertices.append(row)
            coords.append(np.column_stack((u, v)) * tiling + uv_offset)

            if xe == last:
                continue

            for be in range(count - 1):
                a = offset + be + xe * count
                b = offset + be + (xe + 1) * count
                c = offset + be + 1 + (xe + 1) * count
                d = offset + be + 1 + xe * count

                if settings.flip_normals:
                    triangles.extend(((a, c, b), (a, d, c)))
                else:
                    triangles.extend(((a, b, c), (a, c, d)))

        offset += count * len(segments)

    points = np.vstack(vertices) if vertices else np.zeros((0, 3))
    coords = np.vstack(coords) if coords else np.zeros((0, 2))

    dtype = np.uint32 if len(points) > MAX_UINT16_VERTICES else np.uint16
    triangles = np.array(triangles, dtype=dtype).reshape(-1, 3)

    normals = traits.vertex_normals(points, triangles)

    if len(points):
        bounds = traits.bounds(points)
    else:
        bounds = np.zeros(3), np.zeros(3)

    logger.debug('extruded %d groups over %d segments: %d vertices, ' +
                 '%d triangles', len(groups or []), len(segments),
                 len(points), len(triangles))

    return ExtrudedMesh(points, triangles, coords, normals, bounds)


def extrude(profile, segments, settings=None,
            smoothing_angle=DEFAULT_SMOOTHING_ANGLE, uvs=None):
    """ Extrude a profile along transforms.

    Computes the boundary smoothing groups of `profile` and passes them to
    :func:`extrude_groups`. Parameters are the same, `smoothing_angle` is
    the corner angle in degrees at which side walls are split.
    """
    groups = profile.boundary_smoothing_groups(smoothing_angle)

    if not groups:
        logger.debug('profile %s has no boundary smoothing groups, ' +
                     'building caps only', profile.name)

    return extrude_groups(profile, segments, groups, settings, uvs)


class ProfileExtruder:
    """ Profile sweep along a path source.

    Parameters
    ----------
    profile : Mesh
        Profile mesh.
    path : PathSource
        Source of the extrusion transforms.
    settings : ExtrusionSettings, optional
        Requested options. The path source may adjust them.
    smoothing_angle : float, optional
        See :func:`extrude`.
    local_transform : array_like, shape (4, 4), optional
        Transform applied to the profile before it is placed on the path,
        e.g., a rotation and scale composed with :func:`~meshtopo.linalg.trs`.
    uvs : array_like, shape (n, 2), optional
        Texture coordinates of the profile vertices.
    """

    def __init__(self, profile, path, settings=None,
                 smoothing_angle=DEFAULT_SMOOTHING_ANGLE, local_transform=None,
                 uvs=None):
        self.profile = profile
        self.path = path
        self.settings = settings
        self.smoothing_angle = smoothing_angle
        self.uvs = uvs

        if local_transform is None:
            self.local_transform = np.eye(4)
        else:
            self.local_transform = np.asarray(local_transform, dtype=float)

    def __repr__(self):
        return f'ProfileExtruder({self.profile.name!r}, {self.path!r})'

    def segments(self):
        """ Final extrusion transforms.

        Returns
        -------
        list[~numpy.ndarray]
            Path transforms composed with the local profile transform.
        """
        return [m @ self.local_transform for m in self.path.segments()]

    def generate(self):
        """ Extrude the profile.

        Returns
        -------
        ExtrudedMesh or None
            :obj:`None` if the path yields no segments.
        """
        settings = self.settings or ExtrusionSettings.default()
        settings = self.path.adjust_settings(settings)

        result = extrude(self.profile, self.segments(), settings,
                         self.smoothing_angle, self.uvs)

        if result is not None:
            logger.info('extruded %r: %d vertices, %d triangles', self,
                        result.vertex_count, result.triangle_count)

        return result

    def vertex_path(self, index):
        """ Path of a profile vertex.

        Parameters
        ----------
        index : int
            Profile vertex index.

        Returns
        -------
        list[Knot]
            One knot per path transform. Positions are the transformed
            profile vertex, rotations are those of the path frames.
        """
        point = self.profile.points[index]
        knots = []

        for matrix in self.path.segments():
            position = linalg.transform_points(matrix @ self.local_transform,
                                               point)
            knots.append(Knot(position, matrix[:3, :3].copy()))

        return knots
