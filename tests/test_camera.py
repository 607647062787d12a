import numpy as np
import pytest
from PIL import Image

from slamkit.camera import (
    Distortion,
    PinholeCamera,
    depth_point_cloud,
    describe_image,
    join_map,
    load_image,
    main,
    read_poses,
    stereo_point_cloud,
    undistort_image,
)
from slamkit.geometry import Isometry3

RGBD = PinholeCamera(518.0, 519.0, 325.5, 253.5)
UNIT = PinholeCamera(1.0, 1.0, 0.0, 0.0)


def test_pixel_normalized_round_trip():
    x, y = RGBD.pixel_to_normalized(100.0, 200.0)
    u, v = RGBD.normalized_to_pixel(x, y)
    assert u == pytest.approx(100.0)
    assert v == pytest.approx(200.0)


def test_principal_point_maps_to_origin():
    x, y = RGBD.pixel_to_normalized(325.5, 253.5)
    assert (float(x), float(y)) == (0.0, 0.0)


def test_zero_distortion_is_identity():
    xd, yd = Distortion().distort(0.3, -0.2)
    assert float(xd) == pytest.approx(0.3)
    assert float(yd) == pytest.approx(-0.2)


def test_radial_distortion_keeps_direction():
    xd, yd = Distortion(k1=-0.28, k2=0.07).distort(0.3, -0.2)
    assert float(xd) / 0.3 == pytest.approx(float(yd) / -0.2)


def test_undistort_without_distortion_is_identity():
    image = np.arange(20, dtype=np.uint8).reshape(4, 5)
    result = undistort_image(image, UNIT, Distortion())
    assert np.array_equal(result, image)
    assert result.dtype == image.dtype


def test_undistort_out_of_range_pixels_become_zero():
    image = np.full((4, 4), 7, dtype=np.uint8)
    result = undistort_image(image, UNIT, Distortion(k1=1.0))
    assert result[0, 0] == image[0, 0]
    assert result[0, 3] == 0


def test_stereo_cloud_filters_and_projects():
    left = np.full((2, 3), 255, dtype=np.uint8)
    disparity = np.array([[0.0, 10.0, 96.0], [5.0, -1.0, 20.0]])
    camera = PinholeCamera(700.0, 700.0, 1.0, 0.5)
    cloud = stereo_point_cloud(left, disparity, camera, 0.5, 96.0)
    assert cloud.shape == (3, 4)
    assert np.allclose(cloud[:, 2], 700.0 * 0.5 / np.array([10.0, 5.0, 20.0]))
    assert np.allclose(cloud[:, 3], 1.0)


def test_stereo_cloud_rejects_size_mismatch():
    with pytest.raises(ValueError):
        stereo_point_cloud(np.zeros((2, 2)), np.zeros((3, 3)), RGBD)


def test_depth_cloud_skips_zero_and_scales():
    color = np.zeros((2, 2, 3), dtype=np.uint8)
    color[1, 1] = [10, 20, 30]
    depth = np.array([[0, 0], [0, 2000]], dtype=np.uint16)
    cloud = depth_point_cloud(color, depth, UNIT, Isometry3.identity(), 1000.0)
    assert cloud.shape == (1, 6)
    assert cloud[0, 2] == pytest.approx(2000 / 1000.0)
    assert cloud[0].tolist()[3:] == [10.0, 20.0, 30.0]


def test_depth_cloud_applies_pose_translation():
    color = np.zeros((1, 1, 3), dtype=np.uint8)
    depth = np.array([[1000]], dtype=np.uint16)
    base = depth_point_cloud(color, depth, RGBD, Isometry3.identity())
    moved = depth_point_cloud(color, depth, RGBD, Isometry3.identity().pretranslate([1, 2, 3]))
    assert np.allclose(moved[:, :3] - base[:, :3], [1, 2, 3])


def test_depth_cloud_requires_colour():
    with pytest.raises(ValueError):
        depth_point_cloud(np.zeros((2, 2)), np.zeros((2, 2)), RGBD, Isometry3.identity())


def test_read_poses_round_trip(tmp_path):
    path = tmp_path / "pose.txt"
    path.write_text("1 2 3 0 0 0 1\n4 5 6 0 0 0 1\n")
    poses = read_poses(path, 2)
    assert np.allclose(poses[1].translation, [4, 5, 6])
    assert np.allclose(poses[0].rotation, np.eye(3))


def test_read_poses_too_few_values(tmp_path):
    path = tmp_path / "pose.txt"
    path.write_text("1 2 3 0 0 0 1\n")
    with pytest.raises(ValueError):
        read_poses(path, 2)


def test_join_map_concatenates_frames():
    color = np.zeros((2, 2, 3), dtype=np.uint8)
    depth = np.ones((2, 2), dtype=np.uint16)
    cloud = join_map([color, color], [depth, depth], [Isometry3.identity()] * 2, RGBD)
    assert cloud.shape == (8, 6)


def test_join_map_rejects_length_mismatch():
    with pytest.raises(ValueError):
        join_map([np.zeros((1, 1, 3))], [], [], RGBD)


def test_describe_image_reports_size():
    text = describe_image(np.zeros((3, 4, 3), dtype=np.uint8))
    assert "width 4" in text and "height 3" in text and "channels 3" in text


def test_load_image_round_trip(tmp_path):
    array = np.arange(12, dtype=np.uint8).reshape(3, 4)
    path = tmp_path / "gray.png"
    Image.fromarray(array).save(path)
    assert np.array_equal(load_image(path), array)


def test_main_undistort_writes_same_size(tmp_path):
    source = tmp_path / "distorted.png"
    output = tmp_path / "out.png"
    Image.fromarray(np.zeros((6, 8), dtype=np.uint8)).save(source)
    assert main(["undistort", "--image", str(source), "--output", str(output)]) == 0
    assert load_image(output).shape == (6, 8)


def test_main_missing_image_fails(tmp_path):
    assert main(["info", str(tmp_path / "none.png")]) == 1