"""Jacobi-preconditioned conjugate gradient solver for sparse systems."""

from __future__ import annotations

import sys
import time
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import ContextManager, TextIO

import numpy as np

from .csr_matrix import CSRMatrix
from .report import format_snippet, format_timing, timed
from .vector_ops import (
    dot_product_vec4,
    mult_vectors,
    reduce_sum,
    scale_vector,
    sum_vectors,
)

_SNIPPET_LENGTH = 20


class SolverError(ValueError):
    """Raised when the solver is misconfigured or cannot make progress."""


@dataclass(frozen=True)
class SolveResult:
    """Outcome of a conjugate gradient run."""

    x: np.ndarray
    iterations: int
    residual_norm: float
    elapsed: float


@dataclass(eq=False)
class Solver:
    """Solves ``A x = b`` for a symmetric positive definite CSR matrix ``A``."""

    size: int
    matrix: CSRMatrix
    b: np.ndarray
    x: np.ndarray
    lws: int = 32
    epsilon: float = 1e-5
    _out: TextIO | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.b = np.asarray(self.b, dtype=np.float32)
        self.x = np.array(self.x, dtype=np.float32)
        if self.matrix.rows != self.size or self.matrix.cols != self.size:
            raise SolverError(
                f"Matrix of shape {self.matrix.rows}x{self.matrix.cols} "
                f"does not match size {self.size}"
            )
        if self.b.shape != (self.size,):
            raise SolverError(f"Vector b of length {self.b.size} does not match size {self.size}")
        if self.x.shape != (self.size,):
            raise SolverError(f"Vector x of length {self.x.size} does not match size {self.size}")
        if self.lws <= 0:
            raise SolverError("Work-group size must be positive")

    def _say(self, text: str) -> None:
        if self._out is not None:
            self._out.write(text)

    def _timed(self, label: str) -> ContextManager:
        if self._out is None:
            return nullcontext()
        return timed(label, self._out)

    def dot(self, vec1, vec2) -> np.float32:
        """Scalar product computed by four-wide partial products and block sums."""
        try:
            with self._timed("\tdot_product kernel:"):
                partial = dot_product_vec4(vec1, vec2)
        except ValueError as exc:
            raise SolverError(str(exc)) from exc
        start = time.perf_counter()
        total = reduce_sum(partial, self.lws)
        self._say(
            format_timing(
                "\tpartial_sum_reduction kernel (total):",
                (time.perf_counter() - start) * 1e3,
            )
        )
        return total

    def alpha_calculate(self, r, z, p) -> np.float32:
        """Step length ``(r . z) / (p . A p)``."""
        self._say("\t(r \u00b7 z)\n")
        numerator = self.dot(r, z)
        self._say("\n\t(p * A * p)\n")
        with self._timed("\tmat_vec_multiply kernel:"):
            ap = self.matrix.matvec(p)
        denominator = self.dot(p, ap)
        if denominator == 0:
            raise SolverError("Denominator is zero, cannot compute alpha.")
        return np.float32(numerator / denominator)

    def beta_calculate(self, r_next, z_next, r, z) -> np.float32:
        """Direction update factor ``(r_next . z_next) / (r . z)``."""
        self._say("\t(r_(k+1) \u00b7 z_(k+1))\n")
        next_rz = self.dot(r_next, z_next)
        self._say("\t(r \u00b7 z)\n")
        rz = self.dot(r, z)
        with np.errstate(divide="ignore", invalid="ignore"):
            return np.float32(next_rz / rz)

    def update_x(self, p, alpha) -> np.ndarray:
        """Advance the solution: ``x = x + alpha * p``; returns the new ``x``."""
        self._say("\t(alpha * p)\n")
        with self._timed("\tscale_vector kernel:"):
            step = scale_vector(p, alpha)
        self._say("\t(x + alpha * p)\n")
        with self._timed("\tsum_vectors kernel:"):
            self.x = sum_vectors(self.x, step)
        return self.x

    def update_r(self, r, p, alpha) -> np.ndarray:
        """Return the next residue ``r - alpha * A p``."""
        self._say("\t(A * p)\n")
        with self._timed("\tmat_vec_multiply kernel:"):
            ap = self.matrix.matvec(p)
        self._say("\t(-alpha * A * p)\n")
        with self._timed("\tscale_vector kernel:"):
            scaled = scale_vector(ap, -np.float32(alpha))
        self._say("\t(r - alpha * A * p)\n")
        with self._timed("\tsum_vectors kernel"):
            return sum_vectors(r, scaled)

    def update_p(self, z, p, beta) -> np.ndarray:
        """Return the next search direction ``z + beta * p``."""
        self._say("\t(beta * p)\n")
        with self._timed("\tscale_vector kernel:"):
            scaled = scale_vector(p, beta)
        self._say("\t(z + beta * p)\n")
        with self._timed("\tsum_vectors kernel:"):
            return sum_vectors(z, scaled)

    def solve(self, out: TextIO | None = None) -> SolveResult:
        """Run the iteration until the residue norm drops below ``epsilon``."""
        self._out = sys.stdout if out is None else out
        try:
            return self._solve()
        finally:
            self._out = None

    def _solve(self) -> SolveResult:
        length = self.matrix.rows
        max_iter = length

        diagonal = self.matrix.inverted_diagonal()
        r = sum_vectors(self.b, scale_vector(self.matrix.matvec(self.x), -1))
        z = mult_vectors(diagonal, r)
        p = z.copy()

        start = time.perf_counter()
        k = 0
        while True:
            iter_start = time.perf_counter()
            self._say(f"\033[1;32mITERATION {k}\033[0m\n")

            self._say("ALPHA CALCULATE\n")
            alpha = self.alpha_calculate(r, z, p)
            self._say(f"\n\tAlpha = {float(alpha):g}\n")

            self._say("\nUPDATE X\n")
            self.update_x(p, alpha)

            self._say("\nUPDATE R\n")
            r_next = self.update_r(r, p, alpha)

            r_norm = float(np.sqrt(self.dot(r_next, r_next)))
            self._say(f"\n\tResidue norm = {r_norm:g}\n")

            self._say("\nUPDATE Z\n\t(D^(-1) * r_(k+1))\n")
            with self._timed("\tmult_vectors kernel:"):
                z_next = mult_vectors(diagonal, r_next)

            self._say("\nBETA CALCULATE\n")
            beta = self.beta_calculate(r_next, z_next, r, z)
            self._say(f"\n\tBeta = {float(beta):g}\n")

            self._say("\nUPDATE P\n")
            p = self.update_p(z_next, p, beta)

            self._say("\nCOPY R BUFFER\n")
            with self._timed("\tclEnqueueCopyBuffer:"):
                r = r_next.copy()
            self._say("\nCOPY Z BUFFER\n")
            with self._timed("\tclEnqueueCopyBuffer:"):
                z = z_next.copy()

            iter_elapsed = time.perf_counter() - iter_start
            self._say(f"\nIteration {k} time: {iter_elapsed:.3f} s\n")
            self._say("\n")
            k += 1
            if not (r_norm > self.epsilon and k < max_iter):
                break

        elapsed = time.perf_counter() - start
        self._say("\nX (snippet): ")
        self._say(format_snippet(self.x, min(_SNIPPET_LENGTH, len(self.x))))
        self._say(
            f"\nConjugate Gradient converged after {k} iterations with norm {r_norm:g}\n"
        )
        self._say(f"Total time: {elapsed:.3f} s\n")
        return SolveResult(
            x=self.x.copy(), iterations=k, residual_norm=r_norm, elapsed=elapsed
        )


def setup_solver(size: int, matrix: CSRMatrix, b, initial_x=None) -> Solver:
    """Create a solver; the starting guess defaults to the zero vector."""
    x = np.zeros(size, dtype=np.float32) if initial_x is None else initial_x
    return Solver(size=size, matrix=matrix, b=b, x=x)