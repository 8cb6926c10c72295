"""
Adaptive timestep subdivision.

A step of length dt is checked by comparing one step of dt (coarse) against
two steps of dt/2 (fine). If the characteristic arrays of the two results
differ by at most ``tolerance`` the fine result is accepted; otherwise the
step is bisected and each half is searched independently, down to
``max_depth`` levels. Stiff transients therefore get fine resolution only
where they occur.

Error metric: maximum absolute difference between the characteristic arrays
(Amperes through every capacitor and inductor).
"""

from __future__ import annotations

import math
import warnings
from typing import Any, Callable, NamedTuple

import jax

from ..config import SolverConfig, DEFAULT_CONFIG
from ..errors import NumericDivergence, SubdivisionDepthExceeded
from ..logging import logger


class Substep(NamedTuple):
    """An accepted state and the length of the step that produced it."""
    state: Any
    dt: float


class SubdivisionHistory(NamedTuple):
    """Accepted substeps covering one outer step, in time order."""
    substeps: tuple[Substep, ...]
    depth_exceeded: int = 0   # steps accepted at max depth above tolerance
    worst_error: float = 0.0  # largest error among accepted steps


def _update(state, dt: float):
    return state.update(dt)


def max_abs_difference(a, b) -> float:
    """Largest absolute difference of the two states' characteristic arrays."""
    x = a.characteristic_array()
    y = b.characteristic_array()
    if x.shape != y.shape:
        raise ValueError(f"characteristic arrays differ in shape: {x.shape} vs {y.shape}")
    if x.size == 0:
        return 0.0
    # one transfer for both arrays; the reduction is tiny
    x, y = jax.device_get((x, y))
    return float(abs(x - y).max())


class TimestepSubdivisions:
    """
    Recursive bisection of a step until coarse and fine estimates agree.

    Args:
        tolerance: Largest accepted error (see module docstring)
        max_depth: Maximum number of bisections
        min_dt: Steps at or below this length are accepted unchecked (0 disables)
        update: ``update(state, dt) -> state``, immutable; defaults to ``state.update(dt)``
        distance: ``distance(a, b) -> float``; defaults to ``max_abs_difference``
    """

    def __init__(
        self,
        tolerance: float = DEFAULT_CONFIG.tolerance,
        max_depth: int = DEFAULT_CONFIG.max_depth,
        min_dt: float = DEFAULT_CONFIG.min_dt,
        update: Callable[[Any, float], Any] = _update,
        distance: Callable[[Any, Any], float] = max_abs_difference,
    ):
        if tolerance < 0:
            raise ValueError(f"tolerance must be non-negative, got {tolerance}")
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        self.tolerance = tolerance
        self.max_depth = max_depth
        self.min_dt = min_dt
        self.update = update
        self.distance = distance

    @classmethod
    def from_config(cls, config: SolverConfig) -> TimestepSubdivisions:
        return cls(config.tolerance, config.max_depth, config.min_dt)

    def step_in_time_with_history(self, state, dt: float) -> SubdivisionHistory:
        """
        Advance ``state`` by dt, returning every accepted substep.

        dt == 0 returns an empty history: the input state is unchanged.
        Reaching max_depth never fails; the fine estimate is accepted and a
        SubdivisionDepthExceeded warning is issued once for the whole step.
        """
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")
        if dt == 0:
            return SubdivisionHistory(())

        substeps: list[Substep] = []
        stats = {"exceeded": 0, "worst": 0.0}
        self._search(state, dt, self.max_depth, None, substeps, stats)

        logger.debug("substeps per frame: %d", len(substeps))
        if stats["exceeded"]:
            message = (
                f"{stats['exceeded']} substep(s) accepted at maximum subdivision depth "
                f"{self.max_depth} with error {stats['worst']:.3g} > tolerance {self.tolerance:.3g}"
            )
            logger.warning(message)
            warnings.warn(
                SubdivisionDepthExceeded(message, dt=dt, error=stats["worst"]),
                stacklevel=2,
            )
        return SubdivisionHistory(tuple(substeps), stats["exceeded"], stats["worst"])

    def step_unchecked(self, state, dt: float) -> SubdivisionHistory:
        """Advance by a single step of dt with no error control."""
        return SubdivisionHistory((Substep(self.update(state, dt), dt),))

    def _search(self, state, dt: float, depth: int, coarse, substeps: list, stats: dict) -> None:
        if self.min_dt > 0 and dt <= self.min_dt:
            substeps.append(Substep(self.update(state, dt), dt))
            return

        if coarse is None:
            coarse = self.update(state, dt)
        half = self.update(state, dt / 2)
        fine = self.update(half, dt / 2)

        error = self.distance(coarse, fine)
        if not math.isfinite(error):
            raise NumericDivergence(
                f"subdivision error is {error} for dt={dt}", quantity="characteristic_array"
            )

        if error <= self.tolerance or depth == 0:
            if error > self.tolerance:
                stats["exceeded"] += 1
            stats["worst"] = max(stats["worst"], error)
            substeps.append(Substep(fine, dt))  # the more precise estimate
            return

        # the half step already computed is the coarse estimate of the first half
        self._search(state, dt / 2, depth - 1, half, substeps, stats)
        self._search(substeps[-1].state, dt / 2, depth - 1, None, substeps, stats)
