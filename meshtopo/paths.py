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

""" Extrusion path sources.

A path source produces the sequence of rigid transforms a profile is swept
along. Every source exposes the same two methods:

    - :meth:`segments` returns a list of 4x4 matrices, one per profile
      copy (an empty list if the path is too short to be sampled),
    - :meth:`adjust_settings` may modify the extrusion settings that are
      used together with the path, e.g., closed paths disable caps.

The extrusion itself lives in :mod:`meshtopo.extrude` and works with any
object that implements this interface.
"""

import logging
import math
from collections import namedtuple

import numpy as np

import meshtopo.linalg as linalg


logger = logging.getLogger(__name__)


class Knot(namedtuple('Knot', ['position', 'rotation'])):
    """ Curve control point.

    Attributes
    ----------
    position : ~numpy.ndarray, shape (3, )
        Point on the curve.
    rotation : ~numpy.ndarray, shape (3, 3)
        Orientation frame, columns are the right, up and forward axes.
    """

    __slots__ = ()

    @property
    def forward(self):
        return self.rotation[:, 2]

    @property
    def up(self):
        return self.rotation[:, 1]


def _frame(position, forward, up=(0.0, 1.0, 0.0)):
    return linalg.trs(position, linalg.look_rotation(forward, up))


class PathSource:
    """ Path source interface.
    """

    def segments(self):
        """ Extrusion transforms.

        Returns
        -------
        list[~numpy.ndarray]
            Affine 4x4 transforms along the path.
        """
        raise NotImplementedError

    def adjust_settings(self, settings):
        """ Adapt extrusion settings to the path.

        Parameters
        ----------
        settings : ExtrusionSettings
            Requested settings.

        Returns
        -------
        ExtrusionSettings
            Settings to extrude with.
        """
        return settings


class LinearPath(PathSource):
    """ Straight path along the local z-axis.

    Parameters
    ----------
    distance : float, optional
        Extrusion distance, negative values extrude backwards.
    segments_per_meter : float, optional
        Sampling density.
    """

    def __init__(self, distance=5.0, segments_per_meter=1.0):
        self.distance = distance
        self.segments_per_meter = segments_per_meter

    def __repr__(self):
        return (f'LinearPath(distance={self.distance}, ' +
                f'segments_per_meter={self.segments_per_meter})')

    def segments(self):
        n = math.floor(abs(self.distance * self.segments_per_meter))

        if n == 0:
            return []

        return [linalg.translate((0.0, 0.0, self.distance * i / n))
                for i in range(n + 1)]


class CircularPath(PathSource):
    """ Circular arc about the local y-axis.

    The arc starts at :math:`(0, 0, r)` and turns towards the positive
    x-axis for positive angles.

    Parameters
    ----------
    radius : float, optional
        Arc radius.
    angle : float, optional
        Arc angle in degrees.
    segments_per_degree : float, optional
        Sampling density.
    """

    def __init__(self, radius=1.0, angle=30.0, segments_per_degree=0.5):
        self.radius = radius
        self.angle = angle
        self.segments_per_degree = segments_per_degree

    def __repr__(self):
        return (f'{type(self).__name__}(radius={self.radius}, ' +
                f'angle={self.angle})')

    def _count(self):
        return math.floor(abs(self.angle * self.segments_per_degree))

    def segments(self):
        n = self._count()

        if n == 0:
            return []

        matrices = []

        for i in range(n + 1):
            theta = math.radians(self.angle * i / n)
            cos, sin = math.cos(theta), math.sin(theta)

            position = (self.radius * sin, 0.0, self.radius * cos)
            matrices.append(_frame(position, (cos, 0.0, -sin)))

        return matrices


class SpiralPath(CircularPath):
    """ Helical path.

    A :class:`CircularPath` that rises linearly by `height` along the
    local y-axis. Frames look along the tangent of the helix.

    Parameters
    ----------
    radius : float, optional
        Helix radius.
    angle : float, optional
        Total winding angle in degrees.
    height : float, optional
        Total rise.
    segments_per_degree : float, optional
        Sampling density.
    """

    def __init__(self, radius=1.0, angle=30.0, height=0.0,
                 segments_per_degree=0.5):
        super().__init__(radius, angle, segments_per_degree)
        self.height = height

    def segments(self):
        n = self._count()

        if n == 0:
            return []

        step = math.radians(self.angle) / n
        matrices = []

        for i in range(n + 1):
            theta = math.radians(self.angle * i / n)
            cos, sin = math.cos(theta), math.sin(theta)

            position = (self.radius * sin, self.height * i / n,
                        self.radius * cos)
            tangent = (self.radius * cos * step, self.height / n,
                       -self.radius * sin * step)

            matrices.append(_frame(position, tangent))

        return matrices


class PolylinePath(PathSource):
    """ Path along a polyline.

    The polyline is sampled at equal arc length steps. Frames look along
    the polyline segment a sample lies on, the up vector is interpolated
    from the per-point `ups`.

    Parameters
    ----------
    points : array_like, shape (n, 3)
        Polyline vertices.
    ups : array_like, shape (n, 3), optional
        Up vectors per vertex, +y by default.
    segments_per_meter : float, optional
        Sampling density.
    start : float, optional
        Arc length at which sampling starts.
    length : float, optional
        Arc length of the sampled range, up to the end by default.
    closed : bool, optional
        Connect the last point to the first one. Closed paths are
        extruded without caps.

    Raises
    ------
    ValueError
        If there are less than two points or the up vectors do not match
        the points.
    """

    def __init__(self, points, ups=None, segments_per_meter=1.0, start=0.0,
                 length=None, closed=False):
        self.points = np.asarray(points, dtype=float)

        if self.points.ndim != 2 or self.points.shape[1] != 3:
            raise ValueError('polyline points must be 3d vectors')

        if len(self.points) < 2:
            raise ValueError('polyline requires at least two points')

        if ups is None:
            self.ups = np.tile((0.0, 1.0, 0.0), (len(self.points), 1))
        else:
            self.ups = np.asarray(ups, dtype=float)

        if len(self.ups) != len(self.points):
            raise ValueError('number of up vectors != number of points')

        self.segments_per_meter = segments_per_meter
        self.start = start
        self.length = length
        self.closed = closed

    def __repr__(self):
        return (f'PolylinePath({len(self.points)} points, ' +
                f'closed={self.closed})')

    def _polyline(self):
        points, ups = self.points, self.ups

        if self.closed:
            points = np.vstack((points, points[:1]))
            ups = np.vstack((ups, ups[:1]))

        return points, ups

    @property
    def total_length(self):
        """ Arc length of the polyline.

        :type: float
        """
        points, _ = self._polyline()
        return float(np.sum(np.linalg.norm(np.diff(points, axis=0), axis=1)))

    def evaluate(self, distance):
        """ Point, tangent, and up vector at a given arc length.

        Parameters
        ----------
        distance : float
            Arc length, clamped to the polyline.

        Returns
        -------
        point, tangent, up : ~numpy.ndarray
        """
        points, ups = self._polyline()
        lengths = np.linalg.norm(np.diff(points, axis=0), axis=1)
        offsets = np.concatenate(([0.0], np.cumsum(lengths)))

        distance = linalg.clamp(distance, 0.0, offsets[-1])
        k = int(np.searchsorted(offsets, distance, side='right')) - 1
        k = linalg.clamp(k, 0, len(lengths) - 1)

        # Zero length pieces have no direction, move on to the next one.
        while lengths[k] < linalg.EPS and k + 1 < len(lengths):
            k += 1

        t = 0.0
        if lengths[k] >= linalg.EPS:
            t = linalg.clamp((distance - offsets[k]) / lengths[k], 0.0, 1.0)

        point = (1.0 - t) * points[k] + t * points[k + 1]
        tangent = points[k + 1] - points[k]
        up = (1.0 - t) * ups[k] + t * ups[k + 1]

        return point, tangent, up

    def segments(self):
        total = self.total_length
        n = math.floor(abs(total * self.segments_per_meter))

        if n == 0:
            return []

        stop = total if self.length is None else self.start + self.length
        matrices = []

        for i in range(n + 1):
            distance = self.start + total * i / n

            # Allow for rounding in the last sample.
            if distance > min(total, stop) + 1e-9:
                break

            point, tangent, up = self.evaluate(distance)
            matrices.append(_frame(point, tangent, up))

        logger.debug('sampled %d of %d polyline segments', len(matrices),
                     n + 1)

        return matrices

    def adjust_settings(self, settings):
        if self.closed:
            return settings._replace(build_start_cap=False,
                                     build_end_cap=False)

        return settings
