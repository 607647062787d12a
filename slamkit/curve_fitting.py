"""Least-squares fitting of the curve y = exp(a x^2 + b x + c)."""

from __future__ import annotations

import argparse
import time
from dataclasses import dataclass, field

import numpy as np

TRUE_PARAMS = (1.0, 2.0, 1.0)
INITIAL_PARAMS = (2.0, -1.0, 5.0)
DATA_POINTS = 100
NOISE_SIGMA = 1.0


@dataclass
class FitResult:
    """Outcome of a curve fit.

    ``history`` holds one ``(cost, update, params)`` entry per accepted step;
    ``cost`` is the sum of squared residuals at ``params``.
    """

    params: np.ndarray
    cost: float
    iterations: int
    converged: bool
    message: str
    history: list = field(default_factory=list)


def _params3(params) -> np.ndarray:
    array = np.asarray(params, dtype=float).reshape(-1)
    if array.shape != (3,):
        raise ValueError(f"expected three parameters (a, b, c), got {array.shape[0]}")
    return array


def _samples(x, y) -> tuple[np.ndarray, np.ndarray]:
    x = np.asarray(x, dtype=float).reshape(-1)
    y = np.asarray(y, dtype=float).reshape(-1)
    if x.shape != y.shape:
        raise ValueError(f"x and y differ in length: {x.shape[0]} vs {y.shape[0]}")
    if x.size == 0:
        raise ValueError("no data points")
    return x, y


def _check_sigma(sigma: float) -> float:
    if not sigma > 0.0:
        raise ValueError("sigma must be positive")
    return float(sigma)


def exp_model(params, x) -> np.ndarray:
    """Evaluate exp(a x^2 + b x + c) at ``x``."""
    a, b, c = _params3(params)
    x = np.asarray(x, dtype=float)
    return np.exp(a * x * x + b * x + c)


def generate_data(
    n: int = DATA_POINTS, params=TRUE_PARAMS, sigma: float = NOISE_SIGMA, seed=None
) -> tuple[np.ndarray, np.ndarray]:
    """Samples x = i / 100 with y = model(x) plus Gaussian noise of deviation ``sigma``."""
    if n < 0:
        raise ValueError("number of points must not be negative")
    if sigma < 0.0:
        raise ValueError("sigma must not be negative")
    rng = np.random.default_rng(seed)
    x = np.arange(n) / 100.0
    y = exp_model(params, x) + rng.normal(0.0, sigma, n)
    return x, y


def residuals(params, x, y) -> np.ndarray:
    """Errors y - exp(a x^2 + b x + c)."""
    x, y = _samples(x, y)
    return y - exp_model(params, x)


def jacobian(params, x) -> np.ndarray:
    """Derivatives of the residuals with respect to (a, b, c), one row per point."""
    x = np.asarray(x, dtype=float).reshape(-1)
    f = exp_model(params, x)
    return np.column_stack([-x * x * f, -x * f, -f])


def _normal_equations(params, x, y, weight):
    r = residuals(params, x, y)
    j = jacobian(params, x)
    return weight * (j.T @ j), -weight * (j.T @ r), float(r @ r)


def gauss_newton(x, y, initial=INITIAL_PARAMS, iterations: int = 100,
                 sigma: float = NOISE_SIGMA) -> FitResult:
    """Fit by Gauss-Newton; stops when the cost no longer decreases."""
    x, y = _samples(x, y)
    weight = 1.0 / _check_sigma(sigma) ** 2
    params = _params3(initial).copy()
    history = []
    message = "iteration limit reached"
    converged = False
    last_cost = 0.0

    for step in range(iterations):
        with np.errstate(over="ignore", invalid="ignore"):
            h, b, cost = _normal_equations(params, x, y, weight)
            try:
                dx = np.linalg.solve(h, b)
            except np.linalg.LinAlgError:
                dx = np.full(3, np.nan)
        if np.isnan(dx).any() or not np.isfinite(cost):
            message = "result is nan"
            break
        if step > 0 and cost >= last_cost:
            message = f"cost {cost:g} >= last cost {last_cost:g}"
            converged = True
            break
        params = params + dx
        last_cost = cost
        history.append((cost, dx, params.copy()))

    with np.errstate(over="ignore", invalid="ignore"):
        final = residuals(params, x, y)
    return FitResult(params, float(final @ final), len(history), converged, message, history)


def levenberg_marquardt(x, y, initial=INITIAL_PARAMS, max_iterations: int = 50,
                        sigma: float = NOISE_SIGMA) -> FitResult:
    """Fit by Levenberg-Marquardt with an adaptive damping factor."""
    x, y = _samples(x, y)
    weight = 1.0 / _check_sigma(sigma) ** 2
    params = _params3(initial).copy()
    history = []
    converged = False
    message = "iteration limit reached"

    with np.errstate(over="ignore", invalid="ignore"):
        h, b, cost = _normal_equations(params, x, y, weight)
    if not (np.isfinite(cost) and np.isfinite(h).all()):
        return FitResult(params, cost, 0, False, "initial cost is not finite", history)
    mu = 1e-3 * float(np.max(np.diag(h)))
    nu = 2.0

    for _ in range(max_iterations):
        if np.max(np.abs(b)) < 1e-10:
            converged, message = True, "gradient is zero"
            break
        try:
            dx = np.linalg.solve(h + mu * np.eye(3), b)
        except np.linalg.LinAlgError:
            message = "damped system is singular"
            break
        if np.linalg.norm(dx) <= 1e-12 * (np.linalg.norm(params) + 1e-12):
            converged, message = True, "update is negligible"
            break
        candidate = params + dx
        with np.errstate(over="ignore", invalid="ignore"):
            new_r = residuals(candidate, x, y)
            new_cost = float(new_r @ new_r)
        predicted = 0.5 * float(dx @ (mu * dx + b))
        rho = 0.5 * weight * (cost - new_cost) / predicted if predicted > 0 else -1.0
        if np.isfinite(new_cost) and rho > 0.0:
            params = candidate
            with np.errstate(over="ignore", invalid="ignore"):
                h, b, cost = _normal_equations(params, x, y, weight)
            history.append((cost, dx, params.copy()))
            mu *= max(1.0 / 3.0, 1.0 - (2.0 * rho - 1.0) ** 3)
            nu = 2.0
        else:
            mu *= nu
            nu *= 2.0

    return FitResult(params, cost, len(history), converged, message, history)


def _row(values) -> str:
    return " ".join(f"{v:g}" for v in np.asarray(values).reshape(-1))


def main(argv: list[str] | None = None) -> int:
    """Generate noisy samples and fit the exponential curve to them."""
    parser = argparse.ArgumentParser(prog="slamkit-curve-fitting",
                                     description="Fit y = exp(a x^2 + b x + c).")
    parser.add_argument("--method", choices=("gn", "lm"), default="gn",
                        help="Gauss-Newton or Levenberg-Marquardt")
    parser.add_argument("--points", type=int, default=DATA_POINTS)
    parser.add_argument("--sigma", type=float, default=NOISE_SIGMA)
    parser.add_argument("--iterations", type=int, default=100)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args(argv)

    try:
        x, y = generate_data(args.points, TRUE_PARAMS, args.sigma, args.seed)
        start = time.perf_counter()
        if args.method == "gn":
            result = gauss_newton(x, y, INITIAL_PARAMS, args.iterations, args.sigma)
        else:
            result = levenberg_marquardt(x, y, INITIAL_PARAMS, args.iterations, args.sigma)
        elapsed = time.perf_counter() - start
    except ValueError as exc:
        print(f"error: {exc}")
        return 1

    for cost, dx, params in result.history:
        print(f"total cost: {cost:g}, \t\tupdate: {_row(dx)}\t\testimated params: "
              + ",".join(f"{p:g}" for p in params))
    print(result.message)
    print(f"solve time cost = {elapsed:g} seconds. ")
    print("estimated abc = " + ", ".join(f"{p:g}" for p in result.params))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())