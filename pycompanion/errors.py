"""Errors and warnings raised by the circuit analysis engine."""

from __future__ import annotations


class CircuitAnalysisError(Exception):
    """Base class for failures of a circuit solve."""


class SingularMatrix(CircuitAnalysisError):
    """The MNA system has no unique solution.

    Raised for nodes with no path to ground (floating islands) and for loops
    of voltage-source-like elements. ``nodes`` lists the offending nodes when
    they are known.
    """

    def __init__(self, message: str, nodes: tuple = ()):
        super().__init__(message)
        self.nodes = tuple(nodes)


class NumericDivergence(CircuitAnalysisError):
    """A solved quantity is NaN or infinite."""

    def __init__(self, message: str, quantity: str = ""):
        super().__init__(message)
        self.quantity = quantity


class SubdivisionDepthExceeded(UserWarning):
    """A step was accepted at maximum subdivision depth with error above tolerance."""

    def __init__(self, message: str, dt: float = 0.0, error: float = 0.0):
        super().__init__(message)
        self.dt = dt
        self.error = error
