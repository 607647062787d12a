import math

import numpy as np
import pytest

from slamkit.geometry import (
    Isometry3,
    Quaternion,
    angle_axis_to_matrix,
    euler_zyx,
    format_quaternion,
    format_rotation,
    format_vector,
    hat,
    main,
    pose_from_view_matrix,
    so3_exp,
    so3_log,
    vee,
)


def _zyx(yaw, pitch, roll):
    return (
        angle_axis_to_matrix(yaw, [0, 0, 1])
        @ angle_axis_to_matrix(pitch, [0, 1, 0])
        @ angle_axis_to_matrix(roll, [1, 0, 0])
    )


def test_angle_axis_matrix_is_rotation():
    r = angle_axis_to_matrix(0.7, [1.0, 2.0, -0.5])
    assert np.allclose(r @ r.T, np.eye(3))
    assert np.linalg.det(r) == pytest.approx(1.0)


def test_angle_axis_matches_quaternion():
    axis = [0.3, -0.4, 0.8]
    assert np.allclose(
        angle_axis_to_matrix(1.1, axis), Quaternion.from_angle_axis(1.1, axis).to_matrix()
    )


def test_zero_axis_rejected():
    with pytest.raises(ValueError):
        angle_axis_to_matrix(1.0, [0, 0, 0])


def test_quaternion_matrix_round_trip():
    q = Quaternion(0.35, 0.2, 0.3, 0.1).normalized()
    back = Quaternion.from_matrix(q.to_matrix())
    assert np.allclose(back.coeffs(), q.coeffs()) or np.allclose(back.coeffs(), -q.coeffs())


def test_quaternion_from_matrix_negative_trace():
    q = Quaternion.from_angle_axis(3.0, [1.0, 1.0, 0.0])
    back = Quaternion.from_matrix(q.to_matrix())
    assert np.allclose(back.to_matrix(), q.to_matrix())


def test_rotate_matches_conjugation():
    q = Quaternion.from_angle_axis(math.pi / 4, [0, 0, 1])
    v = np.array([1.0, 0.0, 0.0])
    conj = q * Quaternion(0.0, *v) * q.inverse()
    assert np.allclose(q.rotate(v), conj.vec)
    assert np.allclose(q * v, q.rotate(v))


def test_inverse_gives_identity():
    q = Quaternion(1.0, 2.0, -1.0, 0.5)
    product = q * q.inverse()
    assert np.allclose(product.coeffs(), [0, 0, 0, 1])


def test_normalized_unit_length_and_zero_error():
    assert Quaternion(1.0, 2.0, 3.0, 4.0).normalized().norm() == pytest.approx(1.0)
    with pytest.raises(ValueError):
        Quaternion(0.0, 0.0, 0.0, 0.0).normalized()


def test_euler_round_trip():
    angles = euler_zyx(_zyx(0.3, 0.2, 0.1))
    assert np.allclose(angles, [0.3, 0.2, 0.1])


def test_euler_reconstructs_negative_yaw():
    r = _zyx(-0.6, 0.4, -0.2)
    yaw, pitch, roll = euler_zyx(r)
    assert 0.0 <= yaw <= math.pi
    assert np.allclose(_zyx(yaw, pitch, roll), r)


def test_hat_vee_round_trip_and_cross():
    v = np.array([0.5, -1.0, 2.0])
    w = np.array([1.5, 0.25, -0.75])
    assert np.allclose(vee(hat(v)), v)
    assert np.allclose(hat(v) @ w, np.cross(v, w))
    assert np.allclose(hat(v), -hat(v).T)


@pytest.mark.parametrize("phi", [[0.1, -0.2, 0.3], [1e-12, 0.0, 0.0], [0.0, 3.0, 0.0]])
def test_so3_exp_log_round_trip(phi):
    assert np.allclose(so3_log(so3_exp(phi)), phi)


def test_isometry_inverse_and_apply():
    q = Quaternion(-0.5, 0.4, -0.1, 0.2).normalized()
    t = Isometry3.from_quaternion(q, [-0.1, 0.5, 0.3])
    assert np.allclose((t @ t.inverse()).matrix(), np.eye(4))
    p = np.array([0.2, -0.3, 1.0])
    assert np.allclose(t.apply(p), t.rotation @ p + t.translation)
    assert np.allclose(t @ p, t.apply(p))


def test_rotate_then_pretranslate_layout():
    r = angle_axis_to_matrix(math.pi / 4, [0, 0, 1])
    t = Isometry3.identity().rotate(r).pretranslate([1, 3, 4])
    m = t.matrix()
    assert np.allclose(m[:3, :3], r)
    assert np.allclose(m[:3, 3], [1, 3, 4])
    assert np.allclose(m[3], [0, 0, 0, 1])


def test_coordinate_transform_worked_example():
    q1 = Quaternion(0.35, 0.2, 0.3, 0.1).normalized()
    q2 = Quaternion(-0.5, 0.4, -0.1, 0.2).normalized()
    t1w = Isometry3.from_quaternion(q1).pretranslate([0.3, 0.1, 0.1])
    t2w = Isometry3.from_quaternion(q2).pretranslate([-0.1, 0.5, 0.3])
    p2 = t2w @ t1w.inverse() @ np.array([0.5, 0.0, 0.2])
    assert np.allclose(p2, [-0.0309731, 0.73499, 0.296108], atol=1e-5)


def test_log_of_pure_parts():
    t = np.array([0.3, -0.2, 1.0])
    assert np.allclose(Isometry3(translation=t).log(), np.concatenate([t, np.zeros(3)]))
    phi = np.array([0.2, 0.1, -0.4])
    assert np.allclose(Isometry3(rotation=so3_exp(phi)).log(), np.concatenate([np.zeros(3), phi]))


def test_pose_from_view_matrix_is_inverse():
    view = Isometry3(so3_exp([0.1, 0.5, -0.3]), [1.0, 2.0, 3.0])
    pose = pose_from_view_matrix(view.matrix())
    assert np.allclose(pose.matrix(), view.inverse().matrix())


def test_formatting():
    assert format_rotation(np.eye(3)) == "=[1.00,0.00,0.00],[0.00,1.00,0.00],[0.00,0.00,1.00]"
    assert format_vector([0, 0, 0]) == "=[0,0,0]"
    assert format_quaternion(Quaternion(1.0, 0.0, 0.0, 0.0)) == "=[0,0,0,1]"


def test_main_runs(capsys):
    assert main([]) == 0
    assert "they are equal" in capsys.readouterr().out