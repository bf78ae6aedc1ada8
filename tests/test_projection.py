import numpy as np
import pytest
from trimesh import transformations

from lasso_select.config import SelectionConfig
from lasso_select.projection import CameraPose, Projector, ReferenceSurface, project

from .conftest import SQUARE, SQUARE_CURSORS


def test_surface_sits_in_front_of_camera(camera):
    surface = ReferenceSurface.in_front_of(camera, 2000.0, 2000.0)
    assert np.allclose(surface.center, (0.0, 0.0, -2000.0))
    assert np.allclose(surface.axes[:, 2], (0.0, 0.0, 1.0))


def test_center_cursor_hits_surface_center(camera):
    assert np.allclose(project((0.0, 0.0), camera), (0.0, 0.0, -2000.0))


@pytest.mark.parametrize("cursor,expected", list(zip(SQUARE_CURSORS, SQUARE)))
def test_canonical_cursors_project_to_square(camera, cursor, expected):
    assert np.allclose(Projector().project(cursor, camera), expected)


def test_projection_is_deterministic(camera):
    surface = ReferenceSurface.in_front_of(camera, 2000.0, 2000.0)
    a = project((0.31, -0.12), camera, surface)
    b = project((0.31, -0.12), camera, surface)
    assert a is not None
    assert np.allclose(a, b)


def test_cursor_outside_patch_gives_none(camera):
    # ndc 0.9 lands 1800 units off-center; the patch only spans +-1000.
    assert project((0.9, 0.0), camera) is None


def test_larger_surface_accepts_wider_cursor(camera):
    hit = project((0.9, 0.0), camera, config=SelectionConfig(plane_size=4000.0))
    assert np.allclose(hit, (1800.0, 0.0, -2000.0))


def test_surface_behind_ray_gives_none(camera):
    surface = ReferenceSurface(center=np.array([0.0, 0.0, 2000.0]), orientation=camera.orientation, extent=2000.0)
    assert project((0.0, 0.0), camera, surface) is None


def test_projector_follows_camera_moves():
    projector = Projector()
    moved = CameraPose(position=(100.0, 0.0, 50.0), orientation=np.roll(transformations.quaternion_about_axis(np.radians(90.0), (0, 1, 0)), -1), fov=90.0)
    # Turned to look down -X.
    assert np.allclose(moved.forward, (-1.0, 0.0, 0.0), atol=1e-12)
    hit = projector.project((0.0, 0.0), moved)
    assert np.allclose(hit, (-1900.0, 0.0, 50.0))


def test_camera_from_view_matrix():
    view = np.eye(4)
    view[:3, 3] = (0.0, 0.0, -600.0)
    pose = CameraPose.from_view_matrix(view, fov=45.0, aspect=1.5)
    assert np.allclose(pose.position, (0.0, 0.0, 600.0))
    assert np.allclose(pose.forward, (0.0, 0.0, -1.0))
    assert pose.aspect == 1.5


def test_invalid_camera_rejected():
    with pytest.raises(ValueError):
        CameraPose(position=(0, 0, 0), fov=0.0)
    with pytest.raises(ValueError):
        CameraPose(position=(0, 0, 0), orientation=(0, 0, 1))
