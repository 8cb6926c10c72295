"""
Companion models: capacitors and inductors as resistor + source pairs.

Both use the trapezoidal rule, valid for one timestep dt and built from the
state at the start of that step. These are pure functions of
(element, prior state, dt).

Capacitor (Norton form, plus a series resistance to the synthetic node):

    node0 --+-- G_eq = 2C/dt --+-- s -- R_series -- node1
            +-- I_eq  (s->node0) +

    I_eq = G_eq * v_prev + i_prev
    i    = G_eq * v - I_eq

Inductor (Thevenin form):

    node0 -- R_eq = 2L/dt -- s -- V_eq (+ at node1) -- node1

    V_eq = R_eq * i_prev + v_prev
    v    = R_eq * i - V_eq
"""

from __future__ import annotations

from ..mna.network import resistor, battery, current_source
from .core import DynamicCapacitor, DynamicInductor, EquivalentCircuit, SyntheticNode


def capacitor_conductance(capacitance: float, dt: float) -> float:
    """G_eq = 2C/dt."""
    return 2.0 * capacitance / dt


def inductor_resistance(inductance: float, dt: float) -> float:
    """R_eq = 2L/dt."""
    return 2.0 * inductance / dt


def capacitor_companion(
    capacitor: DynamicCapacitor,
    dt: float,
    series_resistance: float = 0.0,
) -> EquivalentCircuit:
    """
    Companion circuit of a capacitor for one step of length dt.

    Args:
        capacitor: Capacitor carrying the state at the start of the step
        dt: Step length in seconds (> 0)
        series_resistance: Resistance between the synthetic node and node1;
            0 becomes a zero-resistance auxiliary element

    Returns:
        EquivalentCircuit whose voltage nodes span the capacitance only
    """
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")
    if capacitor.capacitance <= 0:
        raise ValueError(f"capacitance must be positive, got {capacitor.capacitance}")

    g_eq = capacitor_conductance(capacitor.capacitance, dt)
    i_eq = g_eq * capacitor.voltage + capacitor.current

    internal = SyntheticNode(capacitor.id, 0)
    conductance = resistor(capacitor.node0, internal, 1.0 / g_eq)
    source = current_source(internal, capacitor.node0, i_eq)
    series = resistor(internal, capacitor.node1, series_resistance)

    # the series element carries exactly the capacitor current
    return EquivalentCircuit((conductance, source, series), series, (capacitor.node0, internal))


def inductor_companion(inductor: DynamicInductor, dt: float) -> EquivalentCircuit:
    """
    Companion circuit of an inductor for one step of length dt.

    Args:
        inductor: Inductor carrying the state at the start of the step
        dt: Step length in seconds (> 0)

    Returns:
        EquivalentCircuit whose current element is the companion source
    """
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")
    if inductor.inductance <= 0:
        raise ValueError(f"inductance must be positive, got {inductor.inductance}")

    r_eq = inductor_resistance(inductor.inductance, dt)
    v_eq = r_eq * inductor.current + inductor.voltage

    internal = SyntheticNode(inductor.id, 0)
    series = resistor(inductor.node0, internal, r_eq)
    source = battery(internal, inductor.node1, v_eq)

    return EquivalentCircuit((series, source), source, (inductor.node0, inductor.node1))
