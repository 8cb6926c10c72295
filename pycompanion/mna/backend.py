"""Pluggable linear system backends.

The MNA solver hands a backend the stamps of its system (``Stamps``): the
size, the (row, col, value) triplets of the matrix and the (row, value)
pairs of the right-hand side. Duplicate positions are summed. Picking a
backend picks the numeric precision of the whole engine:

    - JaxLUBackend: LU with partial pivoting in IEEE double precision (default)
    - SympyExactBackend: exact rational arithmetic, slow but free of round-off

Any object with ``solve_linear_system(A, b)`` is also accepted; it receives
the assembled dense matrix.
"""

from __future__ import annotations

import functools
import math
from typing import NamedTuple, Protocol, runtime_checkable

import jax
import jax.numpy as jnp
import jax.scipy.linalg
import sympy
from jax import Array

from ..errors import SingularMatrix
from ..logging import logger


class Stamps(NamedTuple):
    """Sparse description of the square system A x = b."""
    size: int
    rows: tuple[int, ...]
    cols: tuple[int, ...]
    vals: tuple[float, ...]
    b_rows: tuple[int, ...]
    b_vals: tuple[float, ...]

    def device_arrays(self) -> tuple[Array, ...]:
        return (
            jnp.asarray(self.rows, dtype=jnp.int32),
            jnp.asarray(self.cols, dtype=jnp.int32),
            jnp.asarray(self.vals, dtype=jnp.float64),
            jnp.asarray(self.b_rows, dtype=jnp.int32),
            jnp.asarray(self.b_vals, dtype=jnp.float64),
        )

    def assemble(self) -> tuple[Array, Array]:
        """Dense (A, b)."""
        rows, cols, vals, b_rows, b_vals = self.device_arrays()
        return _assemble(self.size, rows, cols, vals, b_rows, b_vals)


def _assemble(n: int, rows, cols, vals, b_rows, b_vals) -> tuple[Array, Array]:
    A = jnp.zeros((n, n), dtype=jnp.float64).at[rows, cols].add(vals)
    b = jnp.zeros(n, dtype=jnp.float64).at[b_rows].add(b_vals)
    return A, b


@runtime_checkable
class LinearSolverBackend(Protocol):
    """Solves the dense square system A x = b."""
    name: str

    def solve_linear_system(self, A: Array, b: Array) -> Array:
        ...


@jax.jit
def _lu_factor_solve(A: Array, b: Array) -> tuple[Array, Array]:
    """Factor and solve in one compiled kernel; also return the U diagonal."""
    lu, piv = jax.scipy.linalg.lu_factor(A)
    x = jax.scipy.linalg.lu_solve((lu, piv), b)
    return x, jnp.diagonal(lu)


@functools.lru_cache(maxsize=64)
def _stamped_kernel(n: int):
    """Compiled assemble + factor + solve for systems of size n."""

    def kernel(rows, cols, vals, b_rows, b_vals):
        A, b = _assemble(n, rows, cols, vals, b_rows, b_vals)
        lu, piv = jax.scipy.linalg.lu_factor(A)
        x = jax.scipy.linalg.lu_solve((lu, piv), b)
        return x, jnp.diagonal(lu)

    return jax.jit(kernel)


def _check_pivots(pivots: list[float], n: int) -> None:
    bad = tuple(k for k, p in enumerate(pivots) if p == 0.0 or not math.isfinite(p))
    if bad:
        logger.debug("LU factorisation hit a zero pivot in rows %s of a %dx%d system", bad, n, n)
        raise SingularMatrix(f"matrix is singular (zero pivot in rows {bad})")


class JaxLUBackend:
    """Double precision LU decomposition with partial pivoting."""
    name = "jax"

    def solve_stamped(self, stamps: Stamps) -> list[float]:
        """One compiled call and one device-to-host transfer per solve."""
        if stamps.size == 0:
            return []
        x, pivots = jax.device_get(_stamped_kernel(stamps.size)(*stamps.device_arrays()))
        _check_pivots(pivots.tolist(), stamps.size)
        return x.tolist()

    def solve_linear_system(self, A: Array, b: Array) -> Array:
        n = A.shape[0]
        if n == 0:
            return jnp.zeros(0)
        x, pivots = _lu_factor_solve(jnp.asarray(A, dtype=jnp.float64), jnp.asarray(b, dtype=jnp.float64))
        _check_pivots(jax.device_get(pivots).tolist(), n)
        return x

    def __repr__(self) -> str:
        return "JaxLUBackend()"

    def __eq__(self, other) -> bool:
        return type(other) is type(self)

    def __hash__(self) -> int:
        return hash(self.name)


class SympyExactBackend:
    """Exact rational LU solve.

    Every float is converted to the rational it represents exactly, the
    system is solved without round-off and the result is rounded back to
    doubles once.
    """
    name = "sympy"

    def _solve_exact(self, A_exact: sympy.Matrix, b_exact: sympy.Matrix) -> list[float]:
        try:
            x = A_exact.LUsolve(b_exact)
        except ValueError as exc:
            # sympy reports a non-invertible matrix as ValueError
            raise SingularMatrix(f"matrix is singular: {exc}") from exc
        return [float(v) for v in x]

    def solve_stamped(self, stamps: Stamps) -> list[float]:
        n = stamps.size
        if n == 0:
            return []
        A_exact = sympy.zeros(n, n)
        for i, j, v in zip(stamps.rows, stamps.cols, stamps.vals):
            A_exact[i, j] += sympy.Rational(v)
        b_exact = sympy.zeros(n, 1)
        for i, v in zip(stamps.b_rows, stamps.b_vals):
            b_exact[i, 0] += sympy.Rational(v)
        return self._solve_exact(A_exact, b_exact)

    def solve_linear_system(self, A: Array, b: Array) -> Array:
        n = A.shape[0]
        if n == 0:
            return jnp.zeros(0)
        rows = jax.device_get(A).tolist()
        rhs = jax.device_get(b).tolist()
        A_exact = sympy.Matrix(n, n, lambda i, j: sympy.Rational(rows[i][j]))
        b_exact = sympy.Matrix(n, 1, lambda i, _: sympy.Rational(rhs[i]))
        return jnp.array(self._solve_exact(A_exact, b_exact), dtype=jnp.float64)

    def __repr__(self) -> str:
        return "SympyExactBackend()"

    def __eq__(self, other) -> bool:
        return type(other) is type(self)

    def __hash__(self) -> int:
        return hash(self.name)


def solve_stamps(backend: LinearSolverBackend, stamps: Stamps) -> list[float]:
    """Solve with the backend's stamped path if it has one, else assemble densely."""
    solve_stamped = getattr(backend, "solve_stamped", None)
    if solve_stamped is not None:
        return solve_stamped(stamps)
    if stamps.size == 0:
        return []
    A, b = stamps.assemble()
    return jax.device_get(backend.solve_linear_system(A, b)).tolist()


_BACKENDS = {
    JaxLUBackend.name: JaxLUBackend,
    SympyExactBackend.name: SympyExactBackend,
}


def get_backend(backend: str | LinearSolverBackend | None = None) -> LinearSolverBackend:
    """
    Resolve a backend.

    Args:
        backend: A backend name ("jax", "sympy"), an object implementing
            ``solve_linear_system``, or None for the default.
    """
    if backend is None:
        return JaxLUBackend()
    if isinstance(backend, str):
        try:
            return _BACKENDS[backend]()
        except KeyError:
            raise ValueError(
                f"Unknown backend {backend!r}; expected one of {sorted(_BACKENDS)}"
            ) from None
    if isinstance(backend, LinearSolverBackend):
        return backend
    raise TypeError(f"Not a linear solver backend: {backend!r}")
