"""Dense linear algebra: solving linear systems and extracting matrix blocks."""

from __future__ import annotations

import argparse
import sys
import time

import numpy as np

MATRIX_SIZE = 50


class SingularMatrixError(ValueError):
    """Raised when a linear system has no unique solution."""


def _square_system(a, b) -> tuple[np.ndarray, np.ndarray]:
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float).reshape(-1)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError(f"coefficient matrix must be square, got shape {a.shape}")
    if b.shape != (a.shape[0],):
        raise ValueError(f"right-hand side must have {a.shape[0]} entries, got {b.shape[0]}")
    return a, b


def gaussian_elimination(a, b) -> np.ndarray:
    """Solve a x = b by elimination without pivoting, then back substitution."""
    a, b = _square_system(a, b)
    n = a.shape[0]
    augmented = np.column_stack([a, b])
    for k in range(n):
        pivot = augmented[k, k]
        if pivot == 0.0:
            raise SingularMatrixError("zero pivot encountered; matrix is singular")
        factors = augmented[k + 1 :, k] / pivot
        augmented[k + 1 :, k:] -= np.outer(factors, augmented[k, k:])

    x = np.zeros(n)
    for i in reversed(range(n)):
        x[i] = (augmented[i, n] - augmented[i, i + 1 : n] @ x[i + 1 :]) / augmented[i, i]
    return x


def eigen_solve(a, b) -> np.ndarray:
    """Solve a x = b through the (real part of the) eigendecomposition of a."""
    a, b = _square_system(a, b)
    values, vectors = np.linalg.eig(a)
    values, vectors = values.real, vectors.real
    if np.any(values == 0.0):
        raise SingularMatrixError("zero eigenvalue encountered")
    try:
        y = np.linalg.inv(vectors) @ b
    except np.linalg.LinAlgError as exc:
        raise SingularMatrixError("eigenvector matrix is singular") from exc
    return vectors @ (y / values)


def extract_block(matrix, row: int, col: int, rows: int = 3, cols: int = 3) -> np.ndarray:
    """Return a copy of the ``rows`` x ``cols`` block starting at (row, col)."""
    m = np.asarray(matrix)
    if m.ndim != 2:
        raise ValueError("expected a two-dimensional matrix")
    if min(row, col, rows, cols) < 0 or row + rows > m.shape[0] or col + cols > m.shape[1]:
        raise IndexError(
            f"block {rows}x{cols} at ({row}, {col}) does not fit a {m.shape[0]}x{m.shape[1]} matrix"
        )
    return m[row : row + rows, col : col + cols].copy()


def _format(matrix, precision: int = 6) -> str:
    array = np.asarray(matrix)
    if array.ndim == 1:
        array = array.reshape(-1, 1)
    if np.iscomplexobj(array):
        cells = [[f"({v.real:.{precision}g},{v.imag:.{precision}g})" for v in row] for row in array]
    else:
        cells = [[f"{v:.{precision}g}" for v in row] for row in array]
    width = max((len(c) for row in cells for c in row), default=0)
    return "\n".join(" ".join(c.rjust(width) for c in row) for row in cells)


def _row(vector, precision: int = 6) -> str:
    return " ".join(f"{v:.{precision}g}" for v in np.asarray(vector).reshape(-1))


def _timed(label: str, solve):
    start = time.perf_counter()
    result = solve()
    elapsed = 1000.0 * (time.perf_counter() - start)
    print(f"time of {label} is {elapsed:g}ms")
    return result


def _matrix_demo(rng: np.random.Generator, size: int) -> None:
    matrix_23 = np.arange(1, 7, dtype=np.float32).reshape(2, 3)
    print("matrix 2x3 from 1 to 6: \n" + _format(matrix_23))
    print("print matrix 2x3: ")
    for row in matrix_23:
        print("".join(f"{value:g}\t" for value in row))

    v_3d = np.array([3.0, 2.0, 1.0])
    vd_3d = np.array([4.0, 5.0, 6.0], dtype=np.float32)
    print("[1,2,3;4,5,6]*[3,2,1]=" + _row(matrix_23.astype(float) @ v_3d))
    print("[1,2,3;4,5,6]*[4,5,6]: " + _row(matrix_23 @ vd_3d))

    m33 = rng.uniform(-1.0, 1.0, (3, 3))
    print("random matrix: \n" + _format(m33))
    print("transpose: \n" + _format(m33.T))
    print(f"sum: {m33.sum():g}")
    diagonal_sum = float(m33.diagonal().sum())
    print(f"trace: {diagonal_sum:g}")
    print("times 10: \n" + _format(10 * m33))
    try:
        print("inverse: \n" + _format(np.linalg.inv(m33)))
    except np.linalg.LinAlgError:
        print("inverse: matrix is singular")
    print(f"det: {np.linalg.det(m33):g}")

    values, vectors = np.linalg.eigh(m33.T @ m33)
    print("Eigen values = \n" + _format(values))
    print("Eigen vectors = \n" + _format(vectors))

    matrix_nn = rng.uniform(-1.0, 1.0, (size, size))
    matrix_nn = matrix_nn @ matrix_nn.T
    v_nd = rng.uniform(-1.0, 1.0, size)

    x = _timed("normal inverse", lambda: np.linalg.inv(matrix_nn) @ v_nd)
    print("x = " + _row(x))

    def qr_solve():
        q, r = np.linalg.qr(matrix_nn)
        return np.linalg.solve(r, q.T @ v_nd)

    x = _timed("Qr decomposition", qr_solve)
    print("x = " + _row(x))

    def cholesky_solve():
        lower = np.linalg.cholesky(matrix_nn)
        return np.linalg.solve(lower.T, np.linalg.solve(lower, v_nd))

    try:
        x = _timed("ldlt decomposition", cholesky_solve)
        print("x = " + _row(x))
    except np.linalg.LinAlgError:
        print("matrix is not positive definite")


def _linear_system_demo(rng: np.random.Generator) -> None:
    b1 = rng.uniform(-1.0, 1.0, (3, 3))
    a1 = b1.T @ b1 + 0.1 * np.eye(3)
    print("eigenValue of A = \n" + _format(np.linalg.eigvals(b1).astype(complex), 3))

    rhs = rng.uniform(-1.0, 1.0, 3)
    print("Solution of Gaussian Elimination: x = \n" + _format(gaussian_elimination(a1, rhs), 3))
    print("Solution of Eigen: x = \n" + _format(np.linalg.solve(a1, rhs), 3))
    print("Solution of lu decomposition: x = \n" + _format(np.linalg.solve(a1, rhs), 3))

    try:
        lower = np.linalg.cholesky(a1)
        llt_x = np.linalg.solve(lower.T, np.linalg.solve(lower, rhs))
        print("Solution of LLT decomposition: x = \n" + _format(llt_x, 3))
    except np.linalg.LinAlgError:
        print("Matrix A is not positive definite!")

    q, r = np.linalg.qr(a1)
    qr_x = np.linalg.solve(r, q.T @ rhs)
    print("Solution of QR decomposition: x = \n" + _format(qr_x, 3))
    print("Q = \n" + _format(q, 3) + "\nR = \n" + _format(r, 3))

    u, singular, vt = np.linalg.svd(a1, full_matrices=False)
    svd_x = vt.T @ ((u.T @ rhs) / singular)
    print("Solution of SVD: x = \n" + _format(svd_x, 3))
    print("Singular values of A:\n" + _format(singular, 3))

    print("Solution of Eigen Value Decomposition: x = \n" + _format(eigen_solve(a1, rhs), 3))


def _block_demo(rng: np.random.Generator) -> None:
    big = rng.uniform(-1.0, 1.0, (5, 5))
    print("The big matrix: \n" + _format(big, 3))
    block = extract_block(big, 0, 0, 3, 3)
    print("The extracted matrix block: \n" + _format(block, 3))
    block = np.eye(3)
    print("The assigned matrix block: \n" + _format(block, 3))


def main(argv: list[str] | None = None) -> int:
    """Run the matrix, linear-system and block-extraction examples."""
    parser = argparse.ArgumentParser(prog="slamkit-linalg", description="Linear algebra examples.")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--size", type=int, default=MATRIX_SIZE, help="size of the large system")
    args = parser.parse_args(argv)
    rng = np.random.default_rng(args.seed)
    _matrix_demo(rng, args.size)
    try:
        _linear_system_demo(rng)
    except SingularMatrixError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    _block_demo(rng)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())