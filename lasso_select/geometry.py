import numpy as np
from trimesh import transformations

EPS = 1e-12


def as_point(p):
    v = np.asarray(p, dtype=np.float64).reshape(-1)
    if v.shape != (3,):
        raise ValueError(f"Expected a 3D point, got shape {np.shape(p)}")
    return v


def plane_through_3_points(a, b, c):
    """Plane through three points with normal ``(c - b) x (a - b)``.

    Returns ``(normal, constant)`` so that the signed distance of ``x`` is
    ``normal . x + constant``. Collinear points yield a zero normal and a
    zero constant.
    """
    a = as_point(a)
    b = as_point(b)
    c = as_point(c)
    normal = np.cross(c - b, a - b)
    length = float(np.linalg.norm(normal))
    if length < EPS:
        return np.zeros(3, dtype=np.float64), 0.0
    normal = normal / length
    return normal, -float(np.dot(normal, a))


def signed_distance(normal, constant, point):
    return float(np.dot(normal, point) + constant)


# Quaternions here are (x, y, z, w); trimesh.transformations uses (w, x, y, z).

def quaternion_to_matrix(q):
    q = np.asarray(q, dtype=np.float64)
    if float(np.dot(q, q)) < EPS:
        raise ValueError("Cannot build rotation matrix from zero-length quaternion")
    return transformations.quaternion_matrix(np.roll(q, 1))[:3, :3]


def matrix_to_quaternion(m):
    rot = np.eye(4)
    rot[:3, :3] = np.asarray(m, dtype=np.float64)[:3, :3]
    return np.roll(transformations.quaternion_from_matrix(rot), -1)
