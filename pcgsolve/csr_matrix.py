"""Compressed sparse row matrices and their dense text format."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, TextIO

import numpy as np


class MatrixFormatError(ValueError):
    """Raised when a matrix description is malformed or inconsistent."""


@dataclass(eq=False)
class CSRMatrix:
    """A sparse matrix in compressed sparse row layout with float32 values."""

    rows: int
    cols: int
    row_ptr: np.ndarray
    col_ind: np.ndarray
    values: np.ndarray

    def __post_init__(self) -> None:
        self.row_ptr = np.asarray(self.row_ptr, dtype=np.int64)
        self.col_ind = np.asarray(self.col_ind, dtype=np.int64)
        self.values = np.asarray(self.values, dtype=np.float32)
        if self.rows < 0 or self.cols < 0:
            raise MatrixFormatError("Matrix dimensions must not be negative")
        if self.row_ptr.shape != (self.rows + 1,):
            raise MatrixFormatError("row_ptr must hold rows + 1 entries")
        if self.col_ind.shape != self.values.shape:
            raise MatrixFormatError("col_ind and values must have the same length")
        if self.row_ptr[0] != 0 or self.row_ptr[-1] != len(self.values):
            raise MatrixFormatError("row_ptr does not match the stored values")

    @property
    def nnz(self) -> int:
        """Number of stored non-zero elements."""
        return int(len(self.values))

    @classmethod
    def from_dense(cls, rows: Iterable[Iterable[float]]) -> "CSRMatrix":
        """Build a matrix from a sequence of equally long rows, dropping zeros."""
        try:
            dense = np.asarray([list(row) for row in rows], dtype=np.float32)
        except ValueError as exc:
            raise MatrixFormatError("Rows must all have the same length") from exc
        if dense.ndim == 1 and dense.size == 0:
            dense = dense.reshape(0, 0)
        if dense.ndim != 2:
            raise MatrixFormatError("Rows must all have the same length")
        mask = dense != 0.0
        counts = mask.sum(axis=1)
        row_ptr = np.concatenate(([0], np.cumsum(counts)))
        return cls(
            rows=dense.shape[0],
            cols=dense.shape[1],
            row_ptr=row_ptr,
            col_ind=np.nonzero(mask)[1],
            values=dense[mask],
        )

    def _row_indices(self) -> np.ndarray:
        return np.repeat(np.arange(self.rows), np.diff(self.row_ptr))

    def matvec(self, vector) -> np.ndarray:
        """Return the product of this matrix with ``vector``."""
        vec = np.asarray(vector, dtype=np.float32)
        if vec.shape != (self.cols,):
            raise ValueError(
                f"Vector of length {vec.size} does not match {self.cols} columns"
            )
        result = np.zeros(self.rows, dtype=np.float32)
        np.add.at(result, self._row_indices(), self.values * vec[self.col_ind])
        return result

    def inverted_diagonal(self) -> np.ndarray:
        """Return 1/a_ii for each row; rows without a stored diagonal give 0."""
        result = np.zeros(self.rows, dtype=np.float32)
        row_idx = self._row_indices()
        on_diagonal = self.col_ind == row_idx
        result[row_idx[on_diagonal]] = np.float32(1.0) / self.values[on_diagonal]
        return result

    def format(self, length: int) -> str:
        """Describe the matrix and list the stored entries of its first rows."""
        if not 0 <= length <= self.rows:
            raise ValueError(f"Cannot show {length} rows of a {self.rows}-row matrix")
        lines = [
            "CSR Matrix:",
            f"Rows: {self.rows}, Cols: {self.cols}, Non-zero elements: {self.nnz}",
        ]
        for i in range(length):
            start, end = self.row_ptr[i], self.row_ptr[i + 1]
            entries = "".join(
                f"({col}, {val:.2f}) "
                for col, val in zip(self.col_ind[start:end], self.values[start:end])
            )
            lines.append(f"Row {i}: {entries}")
        return "\n".join(lines) + "\n"


def _tokens(file: TextIO) -> Iterator[str]:
    for line in file:
        yield from line.split()


def read_csr_matrix(file: TextIO) -> CSRMatrix:
    """Read a dense matrix written as ``cols rows nnz`` followed by its values."""
    tokens = _tokens(file)
    header = [next(tokens, None) for _ in range(3)]
    try:
        cols, rows, nnz = (int(tok) for tok in header)
    except (TypeError, ValueError) as exc:
        raise MatrixFormatError("Error reading matrix size") from exc
    if cols < 0 or rows < 0 or nnz < 0:
        raise MatrixFormatError("Error reading matrix size")

    row_ptr = [0]
    col_ind: list[int] = []
    values: list[np.float32] = []
    for i in range(rows):
        for j in range(cols):
            token = next(tokens, None)
            try:
                value = np.float32(float(token))
            except (TypeError, ValueError) as exc:
                raise MatrixFormatError(
                    f"Error reading matrix value at ({i}, {j})"
                ) from exc
            if value != 0.0:
                if len(values) >= nnz:
                    raise MatrixFormatError(
                        "Too many non-zero values compared to header"
                    )
                col_ind.append(j)
                values.append(value)
        row_ptr.append(len(values))

    if len(values) != nnz:
        raise MatrixFormatError(
            "Number of non-zero elements does not match expected count "
            f"(counted {len(values)}, expected {nnz})"
        )
    return CSRMatrix(rows=rows, cols=cols, row_ptr=row_ptr, col_ind=col_ind, values=values)