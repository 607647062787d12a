[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "slamkit"
version = "0.1.0"
description = "Small tools for 3D geometry, camera models, trajectories and curve fitting used in visual SLAM"
requires-python = ">=3.10"
keywords = ["slam", "geometry", "quaternion", "lie-group", "camera", "point-cloud", "gauss-newton"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Mathematics",
    "Topic :: Scientific/Engineering :: Image Processing",
]
dependencies = [
    "numpy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
slamkit-hello = "slamkit.hello:main"
slamkit-geometry = "slamkit.geometry:main"
slamkit-linalg = "slamkit.linalg:main"
slamkit-trajectory = "slamkit.trajectory:main"
slamkit-camera = "slamkit.camera:main"
slamkit-curve-fit = "slamkit.curve_fitting:main"

[tool.hatch.build.targets.wheel]
packages = ["slamkit"]

[tool.pytest.ini_options]
addopts = "-ra"
