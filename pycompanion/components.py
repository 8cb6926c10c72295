"""Element snapshot factory functions (functional style).

A snapshot is the engine's view of one circuit element for one frame: a
stable id, a kind tag, two node labels, its parameter value and, for
capacitors and inductors, the state carried from the previous frame.
"""

from __future__ import annotations

from typing import Hashable, NamedTuple

from .mna.network import NodeId

KINDS = ("resistor", "battery", "current_source", "capacitor", "inductor", "switch")


class DynamicElementState(NamedTuple):
    """Voltage (V0 - V1) and current (node0 -> node1) at the end of a frame."""
    voltage: float = 0.0
    current: float = 0.0


class ElementSnapshot(NamedTuple):
    """
    One circuit element as seen by a single frame.

    ``value`` is the resistance, voltage, current, capacitance or inductance
    depending on ``kind``; switches use ``closed`` instead.
    """
    id: Hashable
    kind: str
    node0: NodeId
    node1: NodeId
    value: float = 0.0
    internal_resistance: float = 0.0
    closed: bool = False
    state: DynamicElementState | None = None

    def with_state(self, state: DynamicElementState) -> ElementSnapshot:
        return self._replace(state=state)


def R(id: Hashable, node0: NodeId, node1: NodeId, resistance: float) -> ElementSnapshot:
    """
    Create a resistor snapshot.

    Args:
        id: Stable element id
        node0: First terminal
        node1: Second terminal
        resistance: Resistance in Ohms (0 is a perfect conductor)

    Example:
        r1 = R("R1", "1", "0", 3.0)
    """
    return ElementSnapshot(id, "resistor", node0, node1, resistance)


def Battery(
    id: Hashable,
    node0: NodeId,
    node1: NodeId,
    voltage: float,
    *,
    internal_resistance: float = 0.0,
) -> ElementSnapshot:
    """
    Create a battery snapshot.

    Args:
        id: Stable element id
        node0: Negative terminal
        node1: Positive terminal
        voltage: Voltage in Volts, V1 - V0 at zero current
        internal_resistance: Series resistance in Ohms (0 for an ideal source)

    Example:
        b1 = Battery("B1", "0", "1", 9.0)
    """
    return ElementSnapshot(id, "battery", node0, node1, voltage, internal_resistance=internal_resistance)


def ISource(id: Hashable, node0: NodeId, node1: NodeId, current: float) -> ElementSnapshot:
    """Create an ideal current source pushing ``current`` from node0 to node1."""
    return ElementSnapshot(id, "current_source", node0, node1, current)


def C(
    id: Hashable,
    node0: NodeId,
    node1: NodeId,
    capacitance: float,
    *,
    initial_voltage: float = 0.0,
    state: DynamicElementState | None = None,
) -> ElementSnapshot:
    """
    Create a capacitor snapshot.

    Args:
        id: Stable element id
        node0: First terminal (positive for voltage reference)
        node1: Second terminal
        capacitance: Capacitance in Farads (> 0)
        initial_voltage: Voltage used when no carried state is given
        state: State from the previous frame's FrameResult

    Example:
        c1 = C("C1", "2", "0", 1e-2)
    """
    if state is None:
        state = DynamicElementState(initial_voltage, 0.0)
    return ElementSnapshot(id, "capacitor", node0, node1, capacitance, state=state)


def L(
    id: Hashable,
    node0: NodeId,
    node1: NodeId,
    inductance: float,
    *,
    initial_current: float = 0.0,
    state: DynamicElementState | None = None,
) -> ElementSnapshot:
    """
    Create an inductor snapshot.

    Args:
        id: Stable element id
        node0: First terminal
        node1: Second terminal
        inductance: Inductance in Henrys (> 0)
        initial_current: Current used when no carried state is given
        state: State from the previous frame's FrameResult
    """
    if state is None:
        state = DynamicElementState(0.0, initial_current)
    return ElementSnapshot(id, "inductor", node0, node1, inductance, state=state)


def Switch(id: Hashable, node0: NodeId, node1: NodeId, *, closed: bool) -> ElementSnapshot:
    """
    Create a switch snapshot.

    A closed switch is a perfect conductor; an open one is a very large
    (finite) resistance, see ``SolverConfig.open_switch_resistance``.
    """
    return ElementSnapshot(id, "switch", node0, node1, closed=bool(closed))
