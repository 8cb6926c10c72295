"""
Linear time-averaged (LTA) circuit: static elements plus dynamic elements
that are replaced by companion models for one timestep.

Solving the companion circuit is the same as propagating forward in time by
dt; ``update_circuit`` then carries the solved capacitor/inductor state into
a new LTACircuit for the next step.
"""

from __future__ import annotations

from typing import Hashable, NamedTuple, Iterable, Any

from ..mna.backend import LinearSolverBackend, get_backend
from ..mna.network import NodeId
from ..mna.solver import MNACircuit, MNASolution
from .companion import capacitor_companion, inductor_companion
from .core import (
    DynamicCapacitor,
    DynamicInductor,
    EquivalentCircuit,
    ResistiveBattery,
    StaticCurrentSource,
    StaticResistor,
)


class LTASolution(NamedTuple):
    """MNA solution of one companion circuit, queryable by core model id."""
    mna_solution: MNASolution
    equivalents: dict  # core model id -> EquivalentCircuit
    dt: float

    def node_voltage(self, node: NodeId) -> float:
        return self.mna_solution.node_voltage(node)

    def voltage(self, node0: NodeId, node1: NodeId) -> float:
        """V(node0) - V(node1)."""
        return self.mna_solution.voltage(node0, node1)

    def current_for(self, element_id: Hashable) -> float:
        """Current through a core model, positive from its node0 to node1."""
        equivalent: EquivalentCircuit = self.equivalents[element_id]
        return self.mna_solution.current(equivalent.current_element)

    def voltage_for(self, element_id: Hashable) -> float:
        """Voltage across a core model (capacitance only, for capacitors)."""
        node0, node1 = self.equivalents[element_id].voltage_nodes
        return self.voltage(node0, node1)


class LTACircuit(NamedTuple):
    """
    Immutable circuit snapshot for linear transient analysis.

    One LTACircuit is valid for any dt: companion parameters are re-derived
    on every ``solve_propagate`` call from the carried capacitor/inductor
    state.
    """
    resistors: tuple[StaticResistor, ...] = ()
    batteries: tuple[ResistiveBattery, ...] = ()
    current_sources: tuple[StaticCurrentSource, ...] = ()
    capacitors: tuple[DynamicCapacitor, ...] = ()
    inductors: tuple[DynamicInductor, ...] = ()
    ground: NodeId = "0"
    capacitor_series_resistance: float = 0.0
    backend: Any = None

    @classmethod
    def create(
        cls,
        resistors: Iterable[StaticResistor] = (),
        batteries: Iterable[ResistiveBattery] = (),
        current_sources: Iterable[StaticCurrentSource] = (),
        capacitors: Iterable[DynamicCapacitor] = (),
        inductors: Iterable[DynamicInductor] = (),
        *,
        ground: NodeId = "0",
        capacitor_series_resistance: float = 0.0,
        backend: str | LinearSolverBackend | None = None,
    ) -> LTACircuit:
        """Build a circuit, checking that core model ids are unique."""
        circuit = cls(
            tuple(resistors),
            tuple(batteries),
            tuple(current_sources),
            tuple(capacitors),
            tuple(inductors),
            ground,
            capacitor_series_resistance,
            get_backend(backend),
        )
        seen = set()
        for model in circuit.core_models:
            if model.id in seen:
                raise ValueError(f"duplicate element id {model.id!r}")
            seen.add(model.id)
        return circuit

    @property
    def core_models(self) -> tuple:
        return self.resistors + self.batteries + self.current_sources + self.capacitors + self.inductors

    @property
    def dynamic_models(self) -> tuple:
        return self.capacitors + self.inductors

    def companion_equivalents(self, dt: float) -> dict:
        """Equivalent MNA circuit of every core model for a step of length dt."""
        equivalents = {}
        for model in self.resistors + self.batteries + self.current_sources:
            equivalents[model.id] = model.equivalent()
        for capacitor in self.capacitors:
            equivalents[capacitor.id] = capacitor_companion(
                capacitor, dt, self.capacitor_series_resistance
            )
        for inductor in self.inductors:
            equivalents[inductor.id] = inductor_companion(inductor, dt)
        return equivalents

    def solve_propagate(self, dt: float) -> LTASolution:
        """Solve the companion circuit, i.e. propagate forward by dt."""
        equivalents = self.companion_equivalents(dt)
        elements = tuple(
            element for equivalent in equivalents.values() for element in equivalent.elements
        )
        mna_solution = MNACircuit(elements, self.ground).solve(self.backend)
        return LTASolution(mna_solution, equivalents, dt)

    def update_circuit(self, solution: LTASolution) -> LTACircuit:
        """New circuit whose capacitors and inductors carry the solved state."""
        capacitors = tuple(
            c.with_state(solution.voltage_for(c.id), solution.current_for(c.id))
            for c in self.capacitors
        )
        inductors = tuple(
            ind.with_state(solution.voltage_for(ind.id), solution.current_for(ind.id))
            for ind in self.inductors
        )
        return self._replace(capacitors=capacitors, inductors=inductors)

    def update(self, dt: float) -> LTACircuit:
        return self.update_circuit(self.solve_propagate(dt))

    def solve_with_subdivisions(self, dt: float, subdivisions=None):
        """
        Advance by dt under adaptive subdivision.

        Returns:
            LTAStateSet covering dt
        """
        from .results import LTAStateSet
        from .state import LTAState
        from .subdivision import TimestepSubdivisions

        subdivisions = subdivisions if subdivisions is not None else TimestepSubdivisions()
        initial = LTAState(self)
        history = subdivisions.step_in_time_with_history(initial, dt)
        return LTAStateSet(history.substeps, initial)
