"""
Tests for extrusion path sources.
"""

import numpy as np
import pytest

from meshtopo.extrude import ExtrusionSettings
from meshtopo.paths import (CircularPath, Knot, LinearPath, PathSource,
                            PolylinePath, SpiralPath)


def _rigid(matrix):
    r = matrix[:3, :3]
    return np.allclose(r.T @ r, np.eye(3)) and np.isclose(np.linalg.det(r), 1)


def test_linear_path():
    segments = LinearPath(distance=5.0, segments_per_meter=1.0).segments()

    assert len(segments) == 6
    assert np.allclose(segments[-1][:3, 3], (0.0, 0.0, 5.0))
    assert all(np.allclose(m[:3, :3], np.eye(3)) for m in segments)


def test_linear_path_backwards():
    segments = LinearPath(distance=-2.0, segments_per_meter=2.0).segments()

    assert len(segments) == 5
    assert np.allclose(segments[-1][:3, 3], (0.0, 0.0, -2.0))


def test_linear_path_too_short():
    assert LinearPath(distance=0.5, segments_per_meter=1.0).segments() == []


def test_circular_path():
    segments = CircularPath(radius=2.0, angle=90.0,
                            segments_per_degree=0.1).segments()

    assert len(segments) == 10
    assert np.allclose(segments[0][:3, 3], (0.0, 0.0, 2.0))
    assert np.allclose(segments[-1][:3, 3], (2.0, 0.0, 0.0))

    # Frames look along the arc, +y stays up.
    assert np.allclose(segments[0][:3, 2], (1.0, 0.0, 0.0))
    assert np.allclose(segments[-1][:3, 2], (0.0, 0.0, -1.0))
    assert all(np.allclose(m[:3, 1], (0.0, 1.0, 0.0)) for m in segments)
    assert all(_rigid(m) for m in segments)


def test_circular_path_too_short():
    assert CircularPath(angle=1.0, segments_per_degree=0.5).segments() == []


def test_spiral_path():
    path = SpiralPath(radius=1.0, angle=360.0, height=3.0,
                      segments_per_degree=0.1)
    segments = path.segments()

    assert len(segments) == 37
    assert np.allclose(segments[-1][:3, 3], (0.0, 3.0, 1.0))
    assert np.isclose(segments[18][1, 3], 1.5)
    assert all(_rigid(m) for m in segments)

    # The helix climbs, so do the frames.
    assert all(m[1, 2] > 0.0 for m in segments)


def test_flat_spiral_matches_circle():
    spiral = SpiralPath(radius=2.0, angle=60.0, height=0.0).segments()
    circle = CircularPath(radius=2.0, angle=60.0).segments()

    assert np.allclose(spiral, circle)


def test_polyline_path():
    points = [(0, 0, 0), (2, 0, 0), (2, 0, 2)]
    path = PolylinePath(points, segments_per_meter=1.0)

    assert path.total_length == pytest.approx(4.0)

    segments = path.segments()
    assert len(segments) == 5
    assert np.allclose([m[:3, 3] for m in segments],
                       [(0, 0, 0), (1, 0, 0), (2, 0, 0), (2, 0, 1),
                        (2, 0, 2)])
    assert np.allclose(segments[1][:3, 2], (1.0, 0.0, 0.0))
    assert np.allclose(segments[-1][:3, 2], (0.0, 0.0, 1.0))


def test_polyline_path_range():
    points = [(0, 0, 0), (2, 0, 0), (2, 0, 2)]
    path = PolylinePath(points, start=1.0, length=2.0)

    segments = path.segments()
    assert np.allclose([m[:3, 3] for m in segments],
                       [(1, 0, 0), (2, 0, 0), (2, 0, 1)])


def test_polyline_path_up_vectors():
    points = [(0, 0, 0), (1, 0, 0)]
    ups = [(0, 0, 1), (0, 0, 1)]
    segments = PolylinePath(points, ups=ups).segments()

    assert np.allclose(segments[0][:3, 1], (0.0, 0.0, 1.0))

    with pytest.raises(ValueError):
        PolylinePath(points, ups=[(0, 0, 1)])


@pytest.mark.parametrize('points', [
    [],
    [(1, 2, 3)],
    [(0, 0), (1, 0)],
])
def test_polyline_path_invalid_points(points):
    with pytest.raises(ValueError):
        PolylinePath(points)


def test_closed_polyline_disables_caps():
    points = [(0, 0, 0), (1, 0, 0), (1, 0, 1), (0, 0, 1)]
    settings = ExtrusionSettings.default()

    closed = PolylinePath(points, closed=True)
    assert closed.total_length == pytest.approx(4.0)

    adjusted = closed.adjust_settings(settings)
    assert not adjusted.build_start_cap
    assert not adjusted.build_end_cap
    assert settings.build_start_cap

    assert PolylinePath(points).adjust_settings(settings) is settings
    assert LinearPath().adjust_settings(settings) is settings


def test_path_source_interface():
    with pytest.raises(NotImplementedError):
        PathSource().segments()


def test_knot():
    knot = Knot(np.zeros(3), np.eye(3))

    assert np.allclose(knot.forward, (0.0, 0.0, 1.0))
    assert np.allclose(knot.up, (0.0, 1.0, 0.0))
    assert np.allclose(knot.position, 0.0)
