"""
Instantaneous and time-averaged readouts of one subdivided frame.

The distinction matters because the dynamics must continue from the
instantaneous state at the end of the frame, while displays are smoother
when they show the average over every substep: a capacitor wired straight
to a battery produces a current spike that is correct but lasts only a
fraction of a frame.
"""

from __future__ import annotations

import math
from typing import Callable, Hashable, NamedTuple

from ..errors import NumericDivergence
from ..mna.network import NodeId
from .circuit import LTASolution
from .state import LTAState
from .subdivision import Substep


class LTAStateSet(NamedTuple):
    """
    The substeps of one frame plus the state the frame started from.

    All lookups use the stable core model id, never positions, because the
    companion elements are rebuilt for every substep.
    """
    substeps: tuple[Substep, ...]
    initial_state: LTAState | None = None

    @property
    def total_time(self) -> float:
        return float(sum(step.dt for step in self.substeps))

    def final_state(self) -> LTAState:
        """Last accepted state, the baseline for the next frame."""
        if self.substeps:
            return self.substeps[-1].state
        if self.initial_state is None:
            raise ValueError("empty state set has no final state")
        return self.initial_state

    def final_solution(self) -> LTASolution:
        solution = self.final_state().solution
        if solution is None:
            raise ValueError("final state has not been solved")
        return solution

    # Instantaneous values drive the next frame's integration.

    def instantaneous_current(self, element_id: Hashable) -> float:
        return self.final_solution().current_for(element_id)

    def instantaneous_voltage(self, element_id: Hashable) -> float:
        return self.final_solution().voltage_for(element_id)

    def node_voltage(self, node: NodeId) -> float:
        return self.final_solution().node_voltage(node)

    # Time averages are for display.

    def _time_average(self, quantity: Callable[[LTASolution], float], name: str) -> float:
        if not self.substeps:
            return quantity(self.final_solution())
        weighted = sum(quantity(step.state.solution) * step.dt for step in self.substeps)
        average = weighted / sum(step.dt for step in self.substeps)
        if not math.isfinite(average):
            raise NumericDivergence(f"time average of {name} is {average}", quantity=name)
        return float(average)

    def time_average_current(self, element_id: Hashable) -> float:
        """sum(current_i * dt_i) / sum(dt_i) over the substeps."""
        return self._time_average(lambda s: s.current_for(element_id), f"current[{element_id!r}]")

    def time_average_voltage(self, element_id: Hashable) -> float:
        return self._time_average(lambda s: s.voltage_for(element_id), f"voltage[{element_id!r}]")
