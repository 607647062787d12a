"""Pinhole camera model, undistortion, and point clouds from stereo and RGB-D data."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image

from .geometry import Isometry3, Quaternion

DEPTH_SCALE = 1000.0
MAX_DISPARITY = 96.0
STEREO_BASELINE = 0.573
POSE_VALUES = 7  # tx ty tz qx qy qz qw


@dataclass(frozen=True)
class PinholeCamera:
    """Intrinsic parameters of a pinhole camera."""

    fx: float
    fy: float
    cx: float
    cy: float

    def pixel_to_normalized(self, u, v):
        """Map pixel coordinates to the normalised image plane."""
        return (np.asarray(u, dtype=float) - self.cx) / self.fx, (
            np.asarray(v, dtype=float) - self.cy
        ) / self.fy

    def normalized_to_pixel(self, x, y):
        """Map normalised image-plane coordinates to pixels."""
        return self.fx * np.asarray(x, dtype=float) + self.cx, self.fy * np.asarray(
            y, dtype=float
        ) + self.cy


@dataclass(frozen=True)
class Distortion:
    """Radial (k1, k2) and tangential (p1, p2) lens distortion."""

    k1: float = 0.0
    k2: float = 0.0
    p1: float = 0.0
    p2: float = 0.0

    def distort(self, x, y):
        """Apply the distortion to normalised coordinates."""
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        r2 = x * x + y * y
        radial = 1.0 + self.k1 * r2 + self.k2 * r2 * r2
        xd = x * radial + 2.0 * self.p1 * x * y + self.p2 * (r2 + 2.0 * x * x)
        yd = y * radial + self.p1 * (r2 + 2.0 * y * y) + 2.0 * self.p2 * x * y
        return xd, yd


UNDISTORT_CAMERA = PinholeCamera(458.654, 457.296, 367.215, 248.375)
UNDISTORT_DISTORTION = Distortion(-0.28340811, 0.07395907, 0.00019359, 1.76187114e-05)
STEREO_CAMERA = PinholeCamera(718.856, 718.856, 607.1928, 185.2157)
RGBD_CAMERA = PinholeCamera(518.0, 519.0, 325.5, 253.5)


def load_image(path) -> np.ndarray:
    """Load an image file as an array (RGB order for colour images)."""
    with Image.open(path) as img:
        if img.mode == "P":
            img = img.convert("RGB")
        return np.array(img)


def _load_gray(path) -> np.ndarray:
    with Image.open(path) as img:
        return np.array(img.convert("L"))


def describe_image(image) -> str:
    """One-line description of an image's width, height and channel count."""
    array = np.asarray(image)
    if array.ndim == 2:
        channels = 1
    elif array.ndim == 3:
        channels = array.shape[2]
    else:
        raise ValueError(f"not an image: array has {array.ndim} dimensions")
    height, width = array.shape[:2]
    return f"width {width}, height {height}, channels {channels}"


def undistort_image(image, camera: PinholeCamera, distortion: Distortion) -> np.ndarray:
    """Undistort an image by nearest-neighbour lookup; unmapped pixels become 0."""
    source = np.asarray(image)
    if source.ndim not in (2, 3):
        raise ValueError("expected a two- or three-dimensional image array")
    rows, cols = source.shape[:2]
    v, u = np.mgrid[0:rows, 0:cols]
    x, y = camera.pixel_to_normalized(u, v)
    xd, yd = distortion.distort(x, y)
    ud, vd = camera.normalized_to_pixel(xd, yd)
    valid = (ud >= 0) & (vd >= 0) & (ud < cols) & (vd < rows)
    result = np.zeros_like(source)
    result[valid] = source[vd[valid].astype(int), ud[valid].astype(int)]
    return result


def stereo_point_cloud(
    left,
    disparity,
    camera: PinholeCamera,
    baseline: float = STEREO_BASELINE,
    max_disparity: float = MAX_DISPARITY,
) -> np.ndarray:
    """Points (x, y, z, intensity) from a left image and its disparity map.

    Pixels whose disparity is not strictly between 0 and ``max_disparity`` are skipped.
    Intensity is scaled to [0, 1].
    """
    left = np.asarray(left)
    disp = np.asarray(disparity, dtype=float)
    if left.shape[:2] != disp.shape or disp.ndim != 2:
        raise ValueError("left image and disparity map must have the same size")
    v, u = np.nonzero((disp > 0.0) & (disp < max_disparity))
    values = disp[v, u]
    depth = camera.fx * baseline / values
    x, y = camera.pixel_to_normalized(u, v)
    intensity = left[v, u].astype(float) / 255.0
    return np.column_stack([x * depth, y * depth, depth, intensity])


def depth_point_cloud(
    color, depth, camera: PinholeCamera, pose: Isometry3, depth_scale: float = DEPTH_SCALE
) -> np.ndarray:
    """World points (x, y, z, r, g, b) from an RGB image and a depth map.

    Pixels with zero depth are skipped; ``pose`` maps camera to world coordinates.
    """
    color = np.asarray(color)
    depth = np.asarray(depth)
    if color.ndim != 3 or color.shape[2] < 3:
        raise ValueError("colour image must have at least three channels")
    if depth.ndim != 2 or depth.shape != color.shape[:2]:
        raise ValueError("depth map must match the colour image size")
    v, u = np.nonzero(depth)
    z = depth[v, u].astype(float) / depth_scale
    x = (u - camera.cx) * z / camera.fx
    y = (v - camera.cy) * z / camera.fy
    points = np.column_stack([x, y, z])
    world = points @ pose.rotation.T + pose.translation
    rgb = color[v, u, :3].astype(float)
    return np.column_stack([world, rgb])


def read_poses(path, count: int = 5) -> list[Isometry3]:
    """Read ``count`` poses of ``tx ty tz qx qy qz qw`` from a whitespace-separated file."""
    text = Path(path).read_text(encoding="utf-8")
    try:
        numbers = [float(token) for token in text.split()]
    except ValueError as exc:
        raise ValueError(f"{path}: {exc}") from exc
    if len(numbers) < count * POSE_VALUES:
        raise ValueError(
            f"{path}: need {count * POSE_VALUES} values for {count} poses, got {len(numbers)}"
        )
    poses = []
    for start in range(0, count * POSE_VALUES, POSE_VALUES):
        tx, ty, tz, qx, qy, qz, qw = numbers[start : start + POSE_VALUES]
        rotation = Quaternion(qw, qx, qy, qz).normalized()
        poses.append(Isometry3.from_quaternion(rotation, [tx, ty, tz]))
    return poses


def join_map(
    colors: Sequence,
    depths: Sequence,
    poses: Sequence[Isometry3],
    camera: PinholeCamera,
    depth_scale: float = DEPTH_SCALE,
) -> np.ndarray:
    """Merge the point clouds of several RGB-D frames into one array."""
    if not len(colors) == len(depths) == len(poses):
        raise ValueError("colours, depths and poses must have the same length")
    clouds = [
        depth_point_cloud(color, depth, camera, pose, depth_scale)
        for color, depth, pose in zip(colors, depths, poses)
    ]
    if not clouds:
        return np.empty((0, 6))
    return np.concatenate(clouds)


def _cmd_info(args) -> int:
    image = load_image(args.image)
    print(describe_image(image))
    channels = 1 if image.ndim == 2 else image.shape[2]
    if image.dtype != np.uint8 or channels not in (1, 3):
        print("please supply a colour or greyscale image.")
    return 0


def _cmd_undistort(args) -> int:
    image = _load_gray(args.image)
    result = undistort_image(image, UNDISTORT_CAMERA, UNDISTORT_DISTORTION)
    Image.fromarray(result).save(args.output)
    print(f"undistorted image written to {args.output}")
    return 0


def _cmd_stereo(args) -> int:
    left = _load_gray(args.left)
    disparity = load_image(args.disparity).astype(float) / args.disparity_scale
    if disparity.ndim == 3:
        disparity = disparity[..., 0]
    cloud = stereo_point_cloud(left, disparity, STEREO_CAMERA, STEREO_BASELINE, MAX_DISPARITY)
    print(f"point cloud has {len(cloud)} points.")
    if args.output:
        np.savetxt(args.output, cloud)
    return 0


def _cmd_joinmap(args) -> int:
    directory = Path(args.directory)
    poses = read_poses(directory / "pose.txt", args.count)
    colors = [load_image(directory / "color" / f"{i}.png") for i in range(1, args.count + 1)]
    depths = [load_image(directory / "depth" / f"{i}.pgm") for i in range(1, args.count + 1)]
    for i in range(1, args.count + 1):
        print(f"converting image: {i}")
    cloud = join_map(colors, depths, poses, RGBD_CAMERA, DEPTH_SCALE)
    print(f"point cloud has {len(cloud)} points.")
    if args.output:
        np.savetxt(args.output, cloud)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Image inspection, undistortion and point-cloud construction."""
    parser = argparse.ArgumentParser(prog="slamkit-camera", description="Camera examples.")
    commands = parser.add_subparsers(dest="command", required=True)

    info = commands.add_parser("info", help="describe an image")
    info.add_argument("image")
    info.set_defaults(run=_cmd_info)

    undistort = commands.add_parser("undistort", help="undistort a greyscale image")
    undistort.add_argument("--image", default="./distorted.png")
    undistort.add_argument("--output", default="./undistorted.png")
    undistort.set_defaults(run=_cmd_undistort)

    stereo = commands.add_parser("stereo", help="point cloud from a disparity map")
    stereo.add_argument("--left", default="./left.png")
    stereo.add_argument("--disparity", default="./disparity.png")
    stereo.add_argument("--disparity-scale", type=float, default=16.0)
    stereo.add_argument("--output", default=None)
    stereo.set_defaults(run=_cmd_stereo)

    joinmap = commands.add_parser("joinmap", help="merge RGB-D frames into one cloud")
    joinmap.add_argument("--directory", default=".")
    joinmap.add_argument("--count", type=int, default=5)
    joinmap.add_argument("--output", default=None)
    joinmap.set_defaults(run=_cmd_joinmap)

    args = parser.parse_args(argv)
    try:
        return args.run(args)
    except FileNotFoundError as exc:
        print(f"file not found: {exc.filename}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())