"""Vector kernels and work-group arithmetic used by the solver."""

from __future__ import annotations

import numpy as np


def round_div_up(gws: int, lws: int) -> int:
    """Divide ``gws`` by ``lws``, rounding up."""
    return (gws + lws - 1) // lws


def round_mul_up(gws: int, lws: int) -> int:
    """Round ``gws`` up to the next multiple of ``lws``."""
    return round_div_up(gws, lws) * lws


def _pair(vec1, vec2) -> tuple[np.ndarray, np.ndarray]:
    a = np.asarray(vec1, dtype=np.float32)
    b = np.asarray(vec2, dtype=np.float32)
    if a.shape != b.shape or a.ndim != 1:
        raise ValueError(f"Vectors of lengths {a.size} and {b.size} do not match")
    return a, b


def dot_product(vec1, vec2) -> np.float32:
    """Return the scalar product of two vectors."""
    a, b = _pair(vec1, vec2)
    return np.float32(np.dot(a, b))


def dot_product_vec4(vec1, vec2) -> np.ndarray:
    """Return one partial product per group of four elements."""
    a, b = _pair(vec1, vec2)
    if a.size % 4 != 0:
        raise ValueError("Length must be multiple of 4 to use float4")
    return (a * b).reshape(-1, 4).sum(axis=1, dtype=np.float32)


def partial_sum_reduction(values, lws: int) -> np.ndarray:
    """Sum consecutive blocks of ``lws`` values, one result per block."""
    if lws <= 0:
        raise ValueError("Work-group size must be positive")
    data = np.asarray(values, dtype=np.float32)
    padded = np.zeros(round_mul_up(data.size, lws), dtype=np.float32)
    padded[: data.size] = data
    return padded.reshape(-1, lws).sum(axis=1, dtype=np.float32)


def reduce_sum(values, lws: int) -> np.float32:
    """Reduce ``values`` to their total by repeated block sums."""
    data = np.asarray(values, dtype=np.float32)
    if data.size == 0:
        return np.float32(0.0)
    while data.size > 1:
        data = partial_sum_reduction(data, lws)
    return np.float32(data[0])


def sum_vectors(vec1, vec2) -> np.ndarray:
    """Return the element-wise sum of two vectors."""
    a, b = _pair(vec1, vec2)
    return a + b


def scale_vector(vec, scale: float) -> np.ndarray:
    """Return ``vec`` multiplied by ``scale``."""
    return np.asarray(vec, dtype=np.float32) * np.float32(scale)


def mult_vectors(vec1, vec2) -> np.ndarray:
    """Return the element-wise product of two vectors."""
    a, b = _pair(vec1, vec2)
    return a * b