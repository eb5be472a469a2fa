"""
Tests for the vector and transform helpers.
"""

import math

import numpy as np
import pytest

from meshtopo import linalg


def test_angle():
    x = np.array([1.0, 0.0, 0.0])
    y = np.array([0.0, 1.0, 0.0])
    z = np.array([0.0, 0.0, 1.0])

    assert linalg.angle(x, y) == pytest.approx(math.pi / 2)
    assert linalg.angle(x, y, deg=True) == pytest.approx(90.0)
    assert linalg.angle(x, -x, deg=True) == pytest.approx(180.0)
    assert linalg.angle(y, x, a=z) == pytest.approx(-math.pi / 2)
    assert linalg.angle(x, np.zeros(3)) == 0.0


def test_unit_and_norm():
    u = np.array([3.0, 4.0, 0.0])

    assert linalg.norm(u) == pytest.approx(5.0)
    assert np.allclose(linalg.unit(u), (0.6, 0.8, 0.0))
    assert np.allclose(linalg.unit(np.zeros(3)), 0.0)


def test_cross_and_dot():
    u = np.array([1.0, 2.0, 3.0])
    v = np.array([-2.0, 0.5, 4.0])

    assert np.allclose(linalg.cross(u, v), np.cross(u, v))
    assert linalg.dot(u, v) == pytest.approx(np.dot(u, v))


def test_rotate():
    x = np.array([1.0, 0.0, 0.0])
    z = np.array([0.0, 0.0, 1.0])

    assert np.allclose(linalg.rotate(x, z, math.pi / 2), (0.0, 1.0, 0.0))
    assert np.allclose(linalg.rotate(x, z, 0.0, 1.0), (0.0, 1.0, 0.0))


@pytest.mark.parametrize('forward, up', [
    ((0.0, 0.0, 1.0), (0.0, 1.0, 0.0)),
    ((1.0, 2.0, -1.0), (0.0, 1.0, 0.0)),
    ((0.0, 3.0, 0.0), (0.0, 1.0, 0.0)),
    ((1.0, 0.0, 0.0), (0.0, 0.0, 1.0)),
])
def test_look_rotation(forward, up):
    r = linalg.look_rotation(forward, up)

    assert np.allclose(r.T @ r, np.eye(3))
    assert np.isclose(np.linalg.det(r), 1.0)
    assert np.allclose(r[:, 2], linalg.unit(np.asarray(forward)))
    assert np.dot(r[:, 1], up) >= 0.0


def test_look_rotation_degenerate():
    assert np.allclose(linalg.look_rotation((0.0, 0.0, 0.0)), np.eye(3))


def test_trs_and_transforms():
    rotation = linalg.look_rotation((1.0, 0.0, 0.0))
    m = linalg.trs((1.0, 2.0, 3.0), rotation, (2.0, 1.0, 1.0))

    # Local x is scaled first, then mapped to world -z.
    assert np.allclose(linalg.transform_points(m, (1.0, 0.0, 0.0)),
                       (1.0, 2.0, 1.0))
    assert np.allclose(linalg.transform_vectors(m, (0.0, 0.0, 1.0)),
                       (1.0, 0.0, 0.0))

    points = np.array([[0.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    assert linalg.transform_points(m, points).shape == (2, 3)

    assert np.allclose(linalg.translate((1.0, 2.0, 3.0)) @ [0, 0, 0, 1],
                       (1.0, 2.0, 3.0, 1.0))


def test_clamp():
    assert linalg.clamp(5, 0, 3) == 3
    assert linalg.clamp(-1.0, 0.0, 1.0) == 0.0
