"""Immutable (circuit, solution) pairs stepped by the subdivision controller."""

from __future__ import annotations

from typing import NamedTuple

import jax.numpy as jnp
from jax import Array

from .circuit import LTACircuit, LTASolution


class LTAState(NamedTuple):
    """
    A circuit and the solution that produced it.

    ``solution`` is None for a state that has not been stepped yet.
    """
    circuit: LTACircuit
    solution: LTASolution | None = None

    def update(self, dt: float) -> LTAState:
        """Propagate by dt, returning a new state; self is unchanged."""
        solution = self.circuit.solve_propagate(dt)
        return LTAState(self.circuit.update_circuit(solution), solution)

    def characteristic_array(self) -> Array:
        """Currents through every capacitor and inductor, capacitors first."""
        return jnp.array(
            [model.current for model in self.circuit.dynamic_models],
            dtype=jnp.float64,
        )
