"""Linear system elements for Modified Nodal Analysis (immutable/functional style).

An element is a plain value: a kind tag, two node labels and the value of its
defining law. The solver only needs to know which of three behavioural
categories an element falls into:

    CONDUCTANCE  - resistor with R > 0, stamped into the G block
    AUXILIARY    - battery or 0-ohm resistor, adds a branch-current unknown
    INJECTION    - ideal current source, right-hand side only
"""

from __future__ import annotations

from enum import Enum
from typing import Hashable, NamedTuple

NodeId = Hashable


class ElementKind(str, Enum):
    RESISTOR = "resistor"
    BATTERY = "battery"
    CURRENT_SOURCE = "current_source"


class Category(str, Enum):
    CONDUCTANCE = "conductance"
    AUXILIARY = "auxiliary"
    INJECTION = "injection"


class MNAElement(NamedTuple):
    """
    One element of a linear circuit.

    ``value`` is the resistance (Ohms), voltage (Volts, V1 - V0) or current
    (Amperes, node0 -> node1 through the source) depending on ``kind``.
    Positive element current always flows from node0 to node1 through the
    element.
    """
    kind: ElementKind
    node0: NodeId
    node1: NodeId
    value: float

    @property
    def category(self) -> Category:
        if self.kind is ElementKind.CURRENT_SOURCE:
            return Category.INJECTION
        if self.kind is ElementKind.BATTERY or self.value == 0:
            return Category.AUXILIARY
        return Category.CONDUCTANCE

    @property
    def resistance(self) -> float:
        if self.kind is not ElementKind.RESISTOR:
            raise AttributeError(f"{self.kind.value} has no resistance")
        return self.value

    @property
    def voltage(self) -> float:
        if self.kind is not ElementKind.BATTERY:
            raise AttributeError(f"{self.kind.value} has no voltage")
        return self.value

    @property
    def current(self) -> float:
        if self.kind is not ElementKind.CURRENT_SOURCE:
            raise AttributeError(f"{self.kind.value} has no fixed current")
        return self.value

    def contains_node(self, node: NodeId) -> bool:
        """True if either terminal is ``node``."""
        return self.node0 == node or self.node1 == node

    def opposite_node(self, node: NodeId) -> NodeId:
        """The terminal across the element from ``node``."""
        if self.node0 == node:
            return self.node1
        if self.node1 == node:
            return self.node0
        raise ValueError(f"node {node!r} is not a terminal of {self}")

    def __str__(self) -> str:
        unit = {"resistor": "Ohms", "battery": "Volts", "current_source": "Amps"}[self.kind.value]
        return f"{self.kind.value} {self.node0} -> {self.node1} @ {self.value} {unit}"


def resistor(node0: NodeId, node1: NodeId, resistance: float) -> MNAElement:
    """
    Create a resistor.

    Args:
        node0: First terminal
        node1: Second terminal
        resistance: Resistance in Ohms, >= 0. Exactly 0 is solved through an
            auxiliary current unknown instead of a conductance.

    Example:
        r1 = resistor("1", "0", 3.0)
    """
    if resistance < 0:
        raise ValueError(f"resistance must be non-negative, got {resistance}")
    return MNAElement(ElementKind.RESISTOR, node0, node1, float(resistance))


def battery(node0: NodeId, node1: NodeId, voltage: float) -> MNAElement:
    """
    Create an ideal voltage source.

    Args:
        node0: Negative terminal
        node1: Positive terminal, V1 - V0 = voltage
        voltage: Voltage in Volts

    Example:
        b1 = battery("0", "1", 9.0)  # node "1" sits at +9V over node "0"
    """
    return MNAElement(ElementKind.BATTERY, node0, node1, float(voltage))


def current_source(node0: NodeId, node1: NodeId, current: float) -> MNAElement:
    """
    Create an ideal current source.

    Args:
        node0: Terminal the current is drawn from
        node1: Terminal the current is delivered to
        current: Current in Amperes
    """
    return MNAElement(ElementKind.CURRENT_SOURCE, node0, node1, float(current))
