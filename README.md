# pcgsolve

Solve `A x = b` for a sparse, symmetric positive-definite matrix `A` using
the conjugate gradient method with a Jacobi (diagonal) preconditioner.
The matrix is read from a dense text file and kept in compressed sparse row
(CSR) form. Every iteration is traced step by step, together with how long
each step took.

## Installation

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Input files

**Matrix file.** The first three whitespace-separated integers are the number
of columns, the number of rows and the number of non-zero entries. After that
come all `rows × cols` values in row-major order, separated by whitespace.
For the command line the matrix must be square. The count of non-zero entries
must match the header exactly; a mismatch is an error.

```
4 4 10
5.0 -1.0 0.0 0.0
-1.0 5.0 -1.0 0.0
0.0 -1.0 5.0 -1.0
0.0 0.0 -1.0 5.0
```

**Vector file.** The first value is the length of the vector, which must
equal the matrix size. The values follow, separated by whitespace.

```
4
1.0
2.0
3.0
4.0
```

Dot products are computed four elements at a time, so the system size must
be a multiple of 4; otherwise the solver stops with an error.

## Command line

```
pcgsolve MATRIX_FILE VECTOR_FILE [INITIAL_X_FILE]
```

`INITIAL_X_FILE` is optional and uses the same format as the vector file.
Without it the solver starts from the zero vector.

For each iteration the program prints:

- `alpha` and `beta`
- the norm of the residual
- how long each step took, and the time for the whole iteration

When it stops, it prints:

- the first values of the solution (up to 20)
- the iteration count
- the final residual norm
- the total time taken

At least one iteration is always run. After that, iteration stops when either
of these happens:

- the residual norm drops to `1e-5` or below;
- the number of iterations reaches the system size.

The command exits with status 0 after a run. It exits with status 1 in these
cases, writing a message to standard error:

- arguments are missing;
- a file cannot be opened;
- a file is malformed;
- the matrix is not square;
- a vector length does not match;
- the solver fails, for example because the size is not a multiple of 4 or
  because `p · A p` becomes zero.

## Library use

```python
import numpy as np
from pcgsolve.csr_matrix import CSRMatrix
from pcgsolve.conjugate_gradient import setup_solver

A = CSRMatrix.from_dense([
    [5.0, -1.0, 0.0, 0.0],
    [-1.0, 5.0, -1.0, 0.0],
    [0.0, -1.0, 5.0, -1.0],
    [0.0, 0.0, -1.0, 5.0],
])
b = np.array([1.0, 2.0, 3.0, 4.0], dtype=np.float32)

solver = setup_solver(4, A, b, None)  # None starts from the zero vector
result = solver.solve()
print(result.x, result.iterations, result.residual_norm, result.elapsed)
```

### Solver output

`Solver.solve(out)` writes its trace to `out`, or to standard output when no
stream is given. It returns a `SolveResult` with these fields:

- `x`
- `iterations`
- `residual_norm`
- `elapsed` (seconds)

### Solver settings

A `Solver` can also be built directly to change its settings:

- `lws`: the block size used when summing partial products. The default is 32.
- `epsilon`: the convergence threshold. The default is `1e-5`.

### Errors

- Size mismatches and failed steps raise `SolverError`, a `ValueError`.

### Matrices (`pcgsolve.csr_matrix`)

- `read_csr_matrix(file)` reads the matrix format above from an open text
  file. It raises `MatrixFormatError` on bad input.
- `CSRMatrix` has these members:
  - `rows`, `cols`, `nnz`
  - `row_ptr`, `col_ind`, `values` (float32)
  - `from_dense(rows)` builds a matrix from rows of values.
  - `matvec(vector)` multiplies the matrix by a vector.
  - `inverted_diagonal()` returns `1/a_ii` for each row, with 0 where no
    diagonal entry is stored.
  - `format(length)` describes the matrix and lists the stored entries of
    its first `length` rows.

### Vectors

- `pcgsolve.cli.read_vector(file, size)` reads `size` values from an open
  text file.

### Vector kernels (`pcgsolve.vector_ops`)

These are the vector kernels the solver is built from:

- `dot_product`
- `dot_product_vec4`: one partial product per group of four elements
- `partial_sum_reduction`
- `reduce_sum`
- `sum_vectors`
- `scale_vector`
- `mult_vectors`
- `round_div_up` and `round_mul_up`

### Reporting (`pcgsolve.report`)

- `format_snippet(values, n)` formats the first `n` values of a vector.
- `format_timing(label, milliseconds)` formats one timing line.
- `timed(label, out)` is a context manager. It times a block and writes its
  timing line to `out` when the block ends.

## What it does not do

All arithmetic runs on the CPU in float32 through numpy. There is no device
selection and no accelerator back end. The timings are wall-clock times of
each step.

The matrix is read only from the dense text format: no other sparse file
formats are supported.