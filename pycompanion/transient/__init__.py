"""PyCompanion Linear Transient Analysis module.

Capacitors and inductors are replaced by trapezoidal companion models and
solved with the MNA module; each frame is adaptively subdivided.

Core models:
    - StaticResistor, ResistiveBattery, StaticCurrentSource
    - DynamicCapacitor, DynamicInductor: carry (voltage, current) between steps

Stepping:
    - LTACircuit: solve_propagate(dt), update_circuit(solution)
    - LTAState: immutable update(dt), characteristic_array()
    - TimestepSubdivisions: coarse/fine error control by recursive bisection
    - LTAStateSet: instantaneous and time-averaged readouts
"""

from .core import (
    SyntheticNode,
    EquivalentCircuit,
    StaticResistor,
    StaticCurrentSource,
    ResistiveBattery,
    DynamicCapacitor,
    DynamicInductor,
)
from .companion import (
    capacitor_companion,
    inductor_companion,
    capacitor_conductance,
    inductor_resistance,
)
from .circuit import LTACircuit, LTASolution
from .state import LTAState
from .subdivision import TimestepSubdivisions, Substep, SubdivisionHistory, max_abs_difference
from .results import LTAStateSet

__all__ = [
    # Core models
    "SyntheticNode",
    "EquivalentCircuit",
    "StaticResistor",
    "StaticCurrentSource",
    "ResistiveBattery",
    "DynamicCapacitor",
    "DynamicInductor",
    # Companion models
    "capacitor_companion",
    "inductor_companion",
    "capacitor_conductance",
    "inductor_resistance",
    # Stepping
    "LTACircuit",
    "LTASolution",
    "LTAState",
    "TimestepSubdivisions",
    "Substep",
    "SubdivisionHistory",
    "max_abs_difference",
    "LTAStateSet",
]
