"""Jacobi-preconditioned conjugate gradient solver for sparse CSR systems."""

__version__ = "0.1.0"
__all__ = ["csr_matrix", "vector_ops", "report", "conjugate_gradient", "cli"]