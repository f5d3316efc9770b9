"""Command line entry point: solve ``A x = b`` read from text files."""

from __future__ import annotations

import sys
from typing import Iterator, Sequence, TextIO

import numpy as np

from .conjugate_gradient import SolverError, setup_solver
from .csr_matrix import MatrixFormatError, read_csr_matrix

_USAGE = "usage: pcgsolve MATRIX_FILE VECTOR_FILE [INITIAL_X_FILE]\n"


def _tokens(file: TextIO) -> Iterator[str]:
    for line in file:
        yield from line.split()


def _read_values(tokens: Iterator[str], size: int) -> np.ndarray:
    if size < 0:
        raise ValueError("Vector size must not be negative")
    values = np.empty(size, dtype=np.float32)
    for i in range(size):
        token = next(tokens, None)
        try:
            values[i] = float(token)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Error reading vector value at index {i}") from exc
    return values


def read_vector(file: TextIO, size: int) -> np.ndarray:
    """Read ``size`` whitespace-separated float values from ``file``."""
    return _read_values(_tokens(file), size)


def _read_sized_vector(file: TextIO, expected: int, what: str) -> np.ndarray:
    """Read a vector preceded by its length, which must equal ``expected``."""
    tokens = _tokens(file)
    header = next(tokens, None)
    try:
        size = int(header)
    except (TypeError, ValueError):
        size = None
    if size != expected:
        raise ValueError(f"{what} size not supported")
    return _read_values(tokens, size)


def main(argv: Sequence[str] | None = None) -> int:
    """Read a square matrix and a right-hand side, then run the solver."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        sys.stderr.write("Wrong arguments\n")
        sys.stderr.write(_USAGE)
        return 1

    matrix_path, vector_path = args[0], args[1]
    initial_path = args[2] if len(args) > 2 else None

    try:
        with open(matrix_path, encoding="utf-8") as matrix_file:
            matrix = read_csr_matrix(matrix_file)
    except OSError:
        sys.stderr.write(f"Failed to open matrix file: {matrix_path}\n")
        return 1
    except MatrixFormatError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    if matrix.rows != matrix.cols:
        sys.stderr.write("Matrix must be square\n")
        return 1

    try:
        with open(vector_path, encoding="utf-8") as vector_file:
            b = _read_sized_vector(vector_file, matrix.rows, "Vector")
    except OSError:
        sys.stderr.write(f"Failed to open vector file: {vector_path}\n")
        return 1
    except ValueError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    initial_x = None
    if initial_path is not None:
        try:
            with open(initial_path, encoding="utf-8") as initial_file:
                initial_x = _read_sized_vector(
                    initial_file, matrix.rows, "Initial vector x"
                )
        except OSError:
            sys.stderr.write(f"Failed to open initial vector file: {initial_path}\n")
            return 1
        except ValueError as exc:
            sys.stderr.write(f"{exc}\n")
            return 1

    try:
        solver = setup_solver(matrix.rows, matrix, b, initial_x)
        solver.solve(sys.stdout)
    except SolverError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())