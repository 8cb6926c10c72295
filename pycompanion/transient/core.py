"""Core models: circuit elements with a stable id (immutable/functional style).

Each core model knows how to express itself as a small linear circuit of MNA
elements (``EquivalentCircuit``). Static models do this directly; capacitors
and inductors need a timestep and go through ``companion.py``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, NamedTuple

from ..mna.network import MNAElement, NodeId, resistor, battery, current_source


@dataclass(frozen=True)
class SyntheticNode:
    """
    Internal node created while expanding a core model.

    Only equal to another SyntheticNode, so it never collides with a caller
    label such as the tuple ("C1", 0).
    """
    owner: Hashable
    index: int


class EquivalentCircuit(NamedTuple):
    """
    MNA elements standing in for one core model.

    ``current_element`` carries the model's current (node0 -> node1) and
    ``voltage_nodes`` are the nodes across which its voltage is read.
    """
    elements: tuple[MNAElement, ...]
    current_element: MNAElement
    voltage_nodes: tuple[NodeId, NodeId]


class StaticResistor(NamedTuple):
    id: Hashable
    node0: NodeId
    node1: NodeId
    resistance: float

    def equivalent(self) -> EquivalentCircuit:
        element = resistor(self.node0, self.node1, self.resistance)
        return EquivalentCircuit((element,), element, (self.node0, self.node1))


class StaticCurrentSource(NamedTuple):
    id: Hashable
    node0: NodeId
    node1: NodeId
    current: float

    def equivalent(self) -> EquivalentCircuit:
        element = current_source(self.node0, self.node1, self.current)
        return EquivalentCircuit((element,), element, (self.node0, self.node1))


class ResistiveBattery(NamedTuple):
    """
    Battery with optional internal resistance.

    With a nonzero internal resistance the battery is an ideal source from
    node0 to a synthetic node, followed by the resistance to node1.
    """
    id: Hashable
    node0: NodeId
    node1: NodeId
    voltage: float
    internal_resistance: float = 0.0

    def equivalent(self) -> EquivalentCircuit:
        if self.internal_resistance == 0:
            element = battery(self.node0, self.node1, self.voltage)
            return EquivalentCircuit((element,), element, (self.node0, self.node1))
        internal = SyntheticNode(self.id, 0)
        ideal = battery(self.node0, internal, self.voltage)
        series = resistor(internal, self.node1, self.internal_resistance)
        return EquivalentCircuit((ideal, series), ideal, (self.node0, self.node1))


class DynamicCapacitor(NamedTuple):
    """
    Capacitor with the (voltage, current) carried from the last accepted step.

    voltage = V0 - V1 across the capacitance itself, current flows node0 -> node1.
    """
    id: Hashable
    node0: NodeId
    node1: NodeId
    capacitance: float
    voltage: float = 0.0
    current: float = 0.0

    def with_state(self, voltage: float, current: float) -> DynamicCapacitor:
        return self._replace(voltage=voltage, current=current)


class DynamicInductor(NamedTuple):
    """
    Inductor with the (voltage, current) carried from the last accepted step.

    voltage = V0 - V1, current flows node0 -> node1.
    """
    id: Hashable
    node0: NodeId
    node1: NodeId
    inductance: float
    voltage: float = 0.0
    current: float = 0.0

    def with_state(self, voltage: float, current: float) -> DynamicInductor:
        return self._replace(voltage=voltage, current=current)
