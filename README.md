# slamkit

Small building blocks for visual SLAM experiments, built on NumPy and Pillow.

## Modules

- `slamkit.geometry`: quaternions (`Quaternion`, with `from_matrix`,
  `from_angle_axis`, `normalized`, `inverse`, `coeffs`, `to_matrix`, `rotate`
  and `*` for the Hamilton product or for rotating a vector), rigid transforms
  (`Isometry3`, with `identity`, `from_quaternion`, `rotate`, `pretranslate`,
  `matrix`, `inverse`, `apply`, `log` and `@` for composition or for
  transforming a point), `angle_axis_to_matrix`, `euler_zyx`, the SO(3) maps
  `hat`, `vee`, `so3_exp` and `so3_log`, `pose_from_view_matrix`, and the
  one-line formatters `format_rotation`, `format_vector` and
  `format_quaternion`.
- `slamkit.linalg`: `gaussian_elimination` (no pivoting; raises
  `SingularMatrixError` on a zero pivot), `eigen_solve` (solves through the
  real part of the eigendecomposition; raises `SingularMatrixError` on a zero
  eigenvalue or a singular eigenvector matrix) and `extract_block`.
- `slamkit.trajectory`: `parse_trajectory` and `read_trajectory` for lines of
  `time tx ty tz qx qy qz qw` (blank lines and `#` comments are skipped),
  `absolute_trajectory_error` (RMSE of the tangent-space pose differences),
  and `axis_segments` / `path_segments`, which return line segments ready for
  plotting.
- `slamkit.camera`: `PinholeCamera`, `Distortion` (radial k1, k2 and
  tangential p1, p2), `load_image`, `describe_image`, `undistort_image`
  (nearest-neighbour), `stereo_point_cloud` (from a left image and a
  disparity map), `depth_point_cloud`, `read_poses` and `join_map` for
  merging RGB-D frames.
- `slamkit.curve_fitting`: fits `y = exp(a x^2 + b x + c)` with
  `gauss_newton` or `levenberg_marquardt`, both returning a `FitResult`;
  also `exp_model`, `generate_data`, `residuals` and `jacobian`.
- `slamkit.hello`: `print_hello` writes a greeting.

## Installation

```
pip install .
pip install ".[test]"   # to run the tests
```

## Library use

```python
import numpy as np
from slamkit.geometry import Quaternion, Isometry3

q = Quaternion.from_angle_axis(np.pi / 4, [0, 0, 1])
print(q.rotate([1, 0, 0]))

pose = Isometry3.from_quaternion(q, [1, 3, 4])
print(pose.apply([1, 0, 0]))
```

```python
from slamkit.curve_fitting import generate_data, gauss_newton

x, y = generate_data(100, (1.0, 2.0, 1.0), 1.0, seed=0)
result = gauss_newton(x, y, (2.0, -1.0, 5.0), 100, 1.0)
print(result.params, result.cost, result.message)
```

## Commands

```
slamkit-hello                                   # prints a greeting
slamkit-geometry                                # rotation, transform and SO(3) examples
slamkit-linalg [--seed N] [--size N]            # solves random linear systems several ways
slamkit-trajectory FILE                         # pose count and segment counts
slamkit-trajectory GROUNDTRUTH --compare ESTIMATED   # prints the RMSE
slamkit-camera info IMAGE                       # width, height and channels of an image
slamkit-camera undistort [--image P] [--output P]
slamkit-camera stereo [--left P] [--disparity P] [--disparity-scale S] [--output P]
slamkit-camera joinmap [--directory D] [--count N] [--output P]
slamkit-curve-fit [--method gn|lm] [--points N] [--sigma S] [--iterations N] [--seed N]
```

`slamkit-camera joinmap` expects `pose.txt`, `color/1.png`, ... and
`depth/1.pgm`, ... in the given directory. Point clouds are written as plain
text with `--output`.

Each command accepts `--help` for its options.

## What is not included

- No windows or 3D viewers: trajectories and point clouds are returned as
  arrays and line segments, or saved to files, for plotting elsewhere.
- No stereo matching: `stereo_point_cloud` and `slamkit-camera stereo` need a
  disparity map that has already been computed.

## Tests

```
pytest
```