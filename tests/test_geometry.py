import numpy as np
import pytest
from trimesh import transformations

from lasso_select.geometry import (
    matrix_to_quaternion,
    plane_through_3_points,
    quaternion_to_matrix,
    signed_distance,
)


def test_plane_normal_follows_point_order():
    n, d = plane_through_3_points((0, 0, 0), (1, 0, 0), (1, 1, 0))
    # (c - b) x (a - b) = (0, 1, 0) x (-1, 0, 0) = (0, 0, 1)
    assert np.allclose(n, (0.0, 0.0, 1.0))
    assert d == pytest.approx(0.0)
    assert signed_distance(n, d, np.array([5.0, 5.0, 2.0])) == pytest.approx(2.0)
    assert signed_distance(n, d, np.array([5.0, 5.0, -3.0])) == pytest.approx(-3.0)


def test_swapping_first_two_points_flips_normal():
    a, b, c = (1.0, 2.0, 3.0), (0.0, 0.0, 0.0), (4.0, -1.0, 2.0)
    n1, d1 = plane_through_3_points(a, b, c)
    n2, d2 = plane_through_3_points(b, a, c)
    assert np.allclose(n1, -n2)
    assert d1 == pytest.approx(-d2)


def test_collinear_points_give_zero_plane():
    n, d = plane_through_3_points((0, 0, 0), (1, 1, 1), (2, 2, 2))
    assert np.allclose(n, 0.0)
    assert d == 0.0


def test_identity_quaternion_is_xyzw():
    assert np.allclose(quaternion_to_matrix((0.0, 0.0, 0.0, 1.0)), np.eye(3))
    assert np.allclose(np.abs(matrix_to_quaternion(np.eye(3))), (0.0, 0.0, 0.0, 1.0))


def test_quaternion_round_trip_through_matrix():
    q = np.roll(transformations.quaternion_about_axis(np.radians(37.0), (1.0, 2.0, 0.5)), -1)
    q2 = matrix_to_quaternion(quaternion_to_matrix(q))
    assert np.allclose(q, q2) or np.allclose(q, -q2)


def test_quarter_turn_about_y():
    q = np.roll(transformations.quaternion_about_axis(np.radians(90.0), (0, 1, 0)), -1)
    assert np.allclose(quaternion_to_matrix(q) @ (0.0, 0.0, -1.0), (-1.0, 0.0, 0.0), atol=1e-12)


def test_zero_quaternion_rejected():
    with pytest.raises(ValueError):
        quaternion_to_matrix((0, 0, 0, 0))
