import io

import numpy as np
import pytest

from pcgsolve.conjugate_gradient import SolveResult, SolverError, setup_solver
from pcgsolve.csr_matrix import CSRMatrix


def _identity(n):
    return CSRMatrix.from_dense(np.eye(n, dtype=np.float32))


def _banded(n, bandwidth=2):
    rows = []
    for i in range(n):
        row = [0.0] * n
        for j in range(max(0, i - bandwidth), min(n - 1, i + bandwidth) + 1):
            row[j] = 5.0 if i == j else -1.0
        rows.append(row)
    return CSRMatrix.from_dense(rows)


def _sin_vector(n):
    return np.sin(np.arange(n) * 0.1).astype(np.float32)


def test_setup_solver_defaults_to_zero_guess():
    solver = setup_solver(8, _identity(8), np.ones(8))
    np.testing.assert_array_equal(solver.x, np.zeros(8, dtype=np.float32))


def test_setup_solver_rejects_mismatched_vector():
    with pytest.raises(SolverError):
        setup_solver(8, _identity(8), np.ones(4))


def test_setup_solver_rejects_mismatched_matrix():
    with pytest.raises(SolverError):
        setup_solver(8, _identity(4), np.ones(8))


def test_dot_matches_numpy():
    solver = setup_solver(8, _identity(8), np.ones(8))
    a = _sin_vector(8)
    b = np.arange(8, dtype=np.float32)
    assert solver.dot(a, b) == pytest.approx(float(np.dot(a, b)), rel=1e-5)


def test_dot_requires_multiple_of_four():
    solver = setup_solver(8, _identity(8), np.ones(8))
    with pytest.raises(SolverError):
        solver.dot(np.ones(6), np.ones(6))


def test_alpha_zero_direction_raises():
    solver = setup_solver(4, _identity(4), np.ones(4))
    with pytest.raises(SolverError):
        solver.alpha_calculate(np.ones(4), np.ones(4), np.zeros(4))


def test_alpha_for_identity_with_direction_equal_residue_is_one():
    solver = setup_solver(4, _identity(4), np.ones(4))
    r = _sin_vector(4) + 1
    assert solver.alpha_calculate(r, r, r) == pytest.approx(1.0)


def test_beta_of_identical_pairs_is_one():
    solver = setup_solver(8, _identity(8), np.ones(8))
    r = _sin_vector(8) + 1
    assert solver.beta_calculate(r, r, r, r) == pytest.approx(1.0)


def test_update_x_with_zero_alpha_keeps_x():
    x0 = _sin_vector(8)
    solver = setup_solver(8, _identity(8), np.ones(8), x0)
    result = solver.update_x(np.ones(8), 0.0)
    np.testing.assert_array_equal(result, x0)
    np.testing.assert_array_equal(solver.x, x0)


def test_update_x_from_zero_with_unit_alpha_gives_direction():
    solver = setup_solver(8, _identity(8), np.ones(8))
    p = _sin_vector(8)
    np.testing.assert_array_equal(solver.update_x(p, 1.0), p)


def test_update_r_identity_full_step_vanishes():
    solver = setup_solver(8, _identity(8), np.ones(8))
    r = _sin_vector(8)
    np.testing.assert_allclose(solver.update_r(r, r, 1.0), np.zeros(8), atol=1e-7)


def test_update_r_zero_alpha_keeps_residue():
    solver = setup_solver(8, _banded(8), np.ones(8))
    r = _sin_vector(8)
    np.testing.assert_array_equal(solver.update_r(r, np.ones(8), 0.0), r)


def test_update_p_zero_beta_gives_z():
    solver = setup_solver(8, _identity(8), np.ones(8))
    z = _sin_vector(8)
    np.testing.assert_array_equal(solver.update_p(z, np.ones(8), 0.0), z)


def test_solve_identity_converges_in_one_iteration():
    b = _sin_vector(8) + 2
    solver = setup_solver(8, _identity(8), b)
    result = solver.solve(io.StringIO())
    assert isinstance(result, SolveResult)
    assert result.iterations == 1
    np.testing.assert_allclose(result.x, b, rtol=1e-6)
    assert result.residual_norm <= solver.epsilon


def test_solve_banded_satisfies_system():
    n = 16
    matrix = _banded(n)
    b = np.ones(n, dtype=np.float32)
    solver = setup_solver(n, matrix, b, _sin_vector(n))
    result = solver.solve(io.StringIO())
    assert 1 <= result.iterations <= n
    np.testing.assert_allclose(matrix.matvec(result.x), b, atol=1e-4)
    np.testing.assert_array_equal(solver.x, result.x)


def test_solve_writes_progress_report():
    out = io.StringIO()
    solver = setup_solver(8, _banded(8), np.ones(8))
    result = solver.solve(out)
    text = out.getvalue()
    assert "\033[1;32mITERATION 0\033[0m" in text
    assert "ALPHA CALCULATE" in text
    assert f"Conjugate Gradient converged after {result.iterations} iterations" in text
    assert "X (snippet): " in text


def test_solve_from_exact_solution_cannot_compute_alpha():
    b = _sin_vector(8) + 2
    solver = setup_solver(8, _identity(8), b, b)
    with pytest.raises(SolverError):
        solver.solve(io.StringIO())