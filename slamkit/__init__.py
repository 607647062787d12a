"""Geometry, linear algebra, camera, trajectory and curve-fitting tools for visual SLAM."""

__version__ = "0.1.0"

__all__ = ["camera", "curve_fitting", "geometry", "hello", "linalg", "trajectory"]