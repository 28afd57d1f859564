import numpy as np
import pytest

from HandBasis import IDENTITY_BASIS, compute_hand_basis, to_local
from Landmarks import to_points
from VectorMath import cross, dot, vec_len

from conftest import flat_hand, transform


def test_basis_is_orthonormal():
    basis = compute_hand_basis(flat_hand())
    for axis in basis:
        assert vec_len(axis) == pytest.approx(1.0)
    assert dot(basis.x, basis.y) == pytest.approx(0.0, abs=1e-9)
    assert dot(basis.y, basis.z) == pytest.approx(0.0, abs=1e-9)
    assert dot(basis.x, basis.z) == pytest.approx(0.0, abs=1e-9)
    # right-handed
    assert cross(basis.x, basis.y) == pytest.approx(basis.z)


def test_basis_orientation_for_upright_palm():
    basis = compute_hand_basis(flat_hand())
    # x toward the pinky side, y up the fingers, z out of the palm plane
    assert basis.x[0] > 0.9
    assert basis.y[1] > 0.9
    assert basis.z == pytest.approx((0.0, 0.0, 1.0))


def test_local_directions_survive_rigid_motion():
    points = flat_hand()
    moved = to_points(transform(points))

    b0 = compute_hand_basis(points)
    b1 = compute_hand_basis(moved)

    tip_dir = np.subtract(points[8], points[5])
    moved_tip_dir = np.subtract(moved[8], moved[5])
    assert to_local(tuple(moved_tip_dir), b1) == pytest.approx(to_local(tuple(tip_dir), b0), abs=1e-9)


def test_degenerate_landmarks_give_identity():
    points = [(0.0, 0.0, 0.0)] * 21
    assert compute_hand_basis(points) == IDENTITY_BASIS

    # knuckles distinct but wrist on their line
    line = [(0.01 * i, 0.0, 0.0) for i in range(21)]
    assert compute_hand_basis(line) == IDENTITY_BASIS
