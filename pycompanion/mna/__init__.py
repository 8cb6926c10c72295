"""PyCompanion Modified Nodal Analysis module.

Linear, static circuit solving:
    - resistor, battery, current_source: element factories
    - MNACircuit: element set plus ground node, solved with ``solve()``
    - MNASolution: node voltages and element currents
    - JaxLUBackend, SympyExactBackend: interchangeable linear system backends
"""

from .network import MNAElement, ElementKind, Category, NodeId, resistor, battery, current_source
from .backend import LinearSolverBackend, JaxLUBackend, SympyExactBackend, Stamps, get_backend, solve_stamps
from .solver import MNACircuit, MNASolution

__all__ = [
    # Elements
    "MNAElement",
    "ElementKind",
    "Category",
    "NodeId",
    "resistor",
    "battery",
    "current_source",
    # Backends
    "LinearSolverBackend",
    "JaxLUBackend",
    "SympyExactBackend",
    "Stamps",
    "get_backend",
    "solve_stamps",
    # Solving
    "MNACircuit",
    "MNASolution",
]
