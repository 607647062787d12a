"""Reading camera trajectories, comparing them and laying them out for drawing."""

from __future__ import annotations

import argparse
import math
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path

import numpy as np

from .geometry import Isometry3, Quaternion

GROUNDTRUTH_FILE = "./example/groundtruth.txt"
ESTIMATED_FILE = "./example/estimated.txt"

AXIS_COLORS = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))

_FIELDS = 8  # time tx ty tz qx qy qz qw


def parse_trajectory(lines: Iterable[str]) -> list[Isometry3]:
    """Parse lines of ``time tx ty tz qx qy qz qw`` into poses.

    Blank lines and lines starting with ``#`` are skipped.
    """
    poses = []
    for number, line in enumerate(lines, start=1):
        fields = line.split()
        if not fields or fields[0].startswith("#"):
            continue
        if len(fields) != _FIELDS:
            raise ValueError(f"line {number}: expected {_FIELDS} fields, got {len(fields)}")
        try:
            values = [float(field) for field in fields]
        except ValueError as exc:
            raise ValueError(f"line {number}: {exc}") from exc
        _, tx, ty, tz, qx, qy, qz, qw = values
        rotation = Quaternion(qw, qx, qy, qz).normalized()
        poses.append(Isometry3.from_quaternion(rotation, [tx, ty, tz]))
    return poses


def read_trajectory(path) -> list[Isometry3]:
    """Read a trajectory file; raises FileNotFoundError if it is missing."""
    with open(path, encoding="utf-8") as handle:
        return parse_trajectory(handle)


def absolute_trajectory_error(
    groundtruth: Sequence[Isometry3], estimated: Sequence[Isometry3]
) -> float:
    """Root-mean-square of the tangent-space norm of the pose differences."""
    if not groundtruth or not estimated:
        raise ValueError("trajectories must not be empty")
    if len(groundtruth) != len(estimated):
        raise ValueError(
            f"trajectories differ in length: {len(groundtruth)} vs {len(estimated)}"
        )
    total = 0.0
    for truth, guess in zip(groundtruth, estimated):
        error = float(np.linalg.norm((truth.inverse() @ guess).log()))
        total += error * error
    return math.sqrt(total / len(estimated))


def axis_segments(poses: Iterable[Isometry3], length: float = 0.1):
    """Line segments drawing each pose's three axes.

    Returns a list of ``(start, end, colour)`` with red, green and blue for x, y, z.
    """
    segments = []
    for pose in poses:
        origin = pose.translation
        for axis, color in zip(np.eye(3), AXIS_COLORS):
            segments.append((origin, pose @ (length * axis), color))
    return segments


def path_segments(poses: Sequence[Isometry3]):
    """Segments ``(start, end)`` joining consecutive pose positions."""
    return [(first.translation, second.translation) for first, second in zip(poses, poses[1:])]


def main(argv: list[str] | None = None) -> int:
    """Load a trajectory and, if a second one is given, print the RMSE between them."""
    parser = argparse.ArgumentParser(
        prog="slamkit-trajectory", description="Trajectory loading and error."
    )
    parser.add_argument("trajectory", nargs="?", default=GROUNDTRUTH_FILE,
                        help="ground-truth or single trajectory file")
    parser.add_argument("--compare", metavar="ESTIMATED", default=None,
                        help="estimated trajectory to compare against")
    args = parser.parse_args(argv)

    paths = [args.trajectory] + ([args.compare] if args.compare else [])
    trajectories = []
    for path in paths:
        try:
            trajectories.append(read_trajectory(path))
        except FileNotFoundError:
            print(f"trajectory {path} not found.", file=sys.stderr)
            return 1
        except ValueError as exc:
            print(f"trajectory {path}: {exc}", file=sys.stderr)
            return 1

    if len(trajectories) == 1:
        poses = trajectories[0]
        print(f"read total {len(poses)} pose entries")
        print(f"{len(axis_segments(poses))} axis segments, {len(path_segments(poses))} path segments")
        return 0

    try:
        rmse = absolute_trajectory_error(trajectories[0], trajectories[1])
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(f"RMSE = {rmse:g}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())