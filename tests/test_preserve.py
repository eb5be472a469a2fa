"""
Tests for the preserve-topology import pipeline.
"""

import logging

import numpy as np
import pytest

from meshtopo.preserve import from_payload, preserve

from conftest import cube_soup


def _payload(name='cube', zero_normals=False, weld=False):
    points, faces, normals = cube_soup()

    if weld:
        keys = [tuple(p) for p in points]
        unique = list(dict.fromkeys(keys))
        faces = [[unique.index(keys[v]) for v in f] for f in faces]
        points = np.array(unique)
        normals = np.zeros_like(points)

    if zero_normals:
        normals = np.zeros_like(normals)

    return {
        'name': name,
        'vertices': [{'position': p.tolist(), 'normal': n.tolist()}
                     for p, n in zip(points, normals)],
        'faces': [{'vertex_indices': f} for f in faces],
    }


def test_from_payload():
    payload = _payload()
    payload['vertices'][0]['normal'] = [0.0, 0.0, -2.0]

    mesh = from_payload(payload)

    assert mesh.name == 'cube'
    assert len(mesh.vertices) == 24
    assert mesh.triangle_count == 12
    assert np.allclose(mesh.normals[0], (0.0, 0.0, -1.0))


def test_from_payload_drops_short_faces(caplog):
    caplog.set_level(logging.WARNING)
    payload = _payload()
    payload['faces'].append({'vertex_indices': [0, 1]})

    mesh = from_payload(payload)

    assert len(mesh.faces) == 12
    assert 'dropped face #12' in caplog.text


@pytest.mark.parametrize('payload', [
    {},
    {'vertices': [{'position': (0, 0, 0)}]},
    {'vertices': [{'normal': (0, 0, 1)}], 'faces': []},
    {'vertices': [{'position': (0, 0)}], 'faces': []},
    {'vertices': [], 'faces': [{'indices': [0, 1, 2]}]},
])
def test_from_payload_malformed(payload):
    with pytest.raises(ValueError):
        from_payload(payload)


def test_preserve_keeps_hard_corners():
    mesh = preserve(_payload(), smoothing_angle=80.0)

    assert len(mesh.vertices) == 24
    assert mesh.triangle_count == 12
    assert mesh.quad_count == 0


def test_preserve_quadifies_tri_meshes():
    mesh = preserve(_payload(name='Cube_Tri'))

    assert mesh.quad_count == 6
    assert mesh.triangle_count == 0


def test_preserve_quadify_override():
    assert preserve(_payload(name='tri'), quadify=False).quad_count == 0
    assert preserve(_payload(name='box'), quadify=True).quad_count == 6


def test_preserve_without_normals(caplog):
    caplog.set_level(logging.INFO, logger='meshtopo')
    mesh = preserve(_payload(zero_normals=True, weld=True))

    # Flat normals are restored and the corners are split again.
    assert len(mesh.vertices) == 24
    assert np.allclose(np.sort(np.abs(mesh.normals), axis=1),
                       [0.0, 0.0, 1.0])
    assert 'no usable normals' in caplog.text
    assert 'split vertices for hard edges' in caplog.text
    mesh._check()


def test_preserve_soup_without_normals():
    mesh = preserve(_payload(zero_normals=True))

    assert len(mesh.vertices) == 24
    assert np.allclose(np.linalg.norm(mesh.normals, axis=1), 1.0)
