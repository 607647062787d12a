import numpy as np
import pytest

from slamkit.linalg import (
    SingularMatrixError,
    eigen_solve,
    extract_block,
    gaussian_elimination,
    main,
)


@pytest.fixture
def spd_system():
    rng = np.random.default_rng(7)
    b = rng.uniform(-1.0, 1.0, (4, 4))
    a = b.T @ b + 0.1 * np.eye(4)
    rhs = rng.uniform(-1.0, 1.0, 4)
    return a, rhs


def test_gaussian_elimination_solves_system(spd_system):
    a, rhs = spd_system
    x = gaussian_elimination(a, rhs)
    assert np.allclose(a @ x, rhs)
    assert np.allclose(x, np.linalg.solve(a, rhs))


def test_gaussian_elimination_does_not_modify_input(spd_system):
    a, rhs = spd_system
    original = a.copy()
    gaussian_elimination(a, rhs)
    assert np.array_equal(a, original)


def test_gaussian_elimination_zero_pivot():
    with pytest.raises(SingularMatrixError):
        gaussian_elimination([[0.0, 1.0], [1.0, 0.0]], [1.0, 2.0])


def test_gaussian_elimination_singular_last_pivot():
    with pytest.raises(SingularMatrixError):
        gaussian_elimination([[1.0, 2.0], [2.0, 4.0]], [1.0, 2.0])


def test_shape_errors():
    with pytest.raises(ValueError):
        gaussian_elimination(np.ones((2, 3)), [1.0, 2.0])
    with pytest.raises(ValueError):
        eigen_solve(np.eye(3), [1.0, 2.0])


def test_singular_error_is_value_error():
    with pytest.raises(ValueError):
        gaussian_elimination([[0.0]], [1.0])


def test_eigen_solve_matches_direct(spd_system):
    a, rhs = spd_system
    assert np.allclose(eigen_solve(a, rhs), np.linalg.solve(a, rhs))


def test_eigen_solve_zero_eigenvalue():
    with pytest.raises(SingularMatrixError):
        eigen_solve(np.diag([1.0, 0.0, 2.0]), [1.0, 1.0, 1.0])


def test_extract_block_values_and_copy():
    m = np.arange(25, dtype=float).reshape(5, 5)
    block = extract_block(m, 1, 2, 3, 3)
    assert block.shape == (3, 3)
    assert np.array_equal(block, m[1:4, 2:5])
    block[:] = np.eye(3)
    assert m[1, 2] == 7.0


def test_extract_block_default_size():
    m = np.arange(25, dtype=float).reshape(5, 5)
    assert np.array_equal(extract_block(m, 0, 0), m[:3, :3])


def test_extract_block_out_of_range():
    with pytest.raises(IndexError):
        extract_block(np.zeros((5, 5)), 3, 0, 3, 3)
    with pytest.raises(IndexError):
        extract_block(np.zeros((5, 5)), -1, 0, 2, 2)


def test_main_runs(capsys):
    assert main(["--seed", "1", "--size", "8"]) == 0
    out = capsys.readouterr().out
    assert "Solution of Gaussian Elimination" in out
    assert "The extracted matrix block" in out