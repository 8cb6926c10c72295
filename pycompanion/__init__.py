"""PyCompanion - JAX-based linear transient circuit analysis.

This package provides the circuit analysis engine of an interactive circuit
construction simulation:
    - mna: Modified Nodal Analysis of resistors, batteries and current sources
    - transient: companion models, adaptive timestep subdivision, time averages

Usage:
    from pycompanion import ElementSnapshot, solve
    from pycompanion.mna import MNACircuit, resistor, battery, current_source
    from pycompanion.transient import LTACircuit, TimestepSubdivisions
"""

import jax

# Voltages and currents are IEEE doubles.
jax.config.update("jax_enable_x64", True)

from .config import SolverConfig, DEFAULT_CONFIG  # noqa: E402
from .errors import (  # noqa: E402
    CircuitAnalysisError,
    SingularMatrix,
    NumericDivergence,
    SubdivisionDepthExceeded,
)
from .components import ElementSnapshot, DynamicElementState, R, C, L, Battery, ISource, Switch  # noqa: E402
from .engine import FrameResult, build_circuit, solve  # noqa: E402

__version__ = "0.1.0"
__all__ = [
    "mna",
    "transient",
    "SolverConfig",
    "DEFAULT_CONFIG",
    "CircuitAnalysisError",
    "SingularMatrix",
    "NumericDivergence",
    "SubdivisionDepthExceeded",
    "ElementSnapshot",
    "FrameResult",
    "DynamicElementState",
    "R",
    "C",
    "L",
    "Battery",
    "ISource",
    "Switch",
    "build_circuit",
    "solve",
    "__version__",
]
