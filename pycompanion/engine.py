"""
Frame-level entry point.

Once per animation frame the caller hands over a flattened snapshot of the
circuit and a dt; ``solve`` builds an LTACircuit from scratch, runs the
subdivision controller over dt and reduces the substeps to instantaneous and
time-averaged readouts plus the capacitor/inductor state to feed back next
frame. The caller's snapshots are never mutated.
"""

from __future__ import annotations

import math
from typing import Collection, Hashable, Iterable, NamedTuple

from .components import KINDS, DynamicElementState, ElementSnapshot
from .config import DEFAULT_CONFIG, SolverConfig
from .errors import SingularMatrix
from .logging import logger
from .mna.backend import LinearSolverBackend
from .mna.network import NodeId
from .transient.circuit import LTACircuit
from .transient.core import (
    DynamicCapacitor,
    DynamicInductor,
    ResistiveBattery,
    StaticCurrentSource,
    StaticResistor,
    SyntheticNode,
)
from .transient.results import LTAStateSet
from .transient.state import LTAState
from .transient.subdivision import SubdivisionHistory, TimestepSubdivisions


class FrameResult(NamedTuple):
    """Everything the caller needs from one frame, keyed by element id."""
    instantaneous_current: dict
    instantaneous_voltage: dict
    average_current: dict
    average_voltage: dict
    dynamic_state: dict  # id -> DynamicElementState, capacitors and inductors only
    node_voltages: dict  # caller nodes only, at the end of the frame
    substeps: int
    depth_exceeded: bool
    state_set: LTAStateSet

    def next_snapshots(self, elements: Iterable[ElementSnapshot]) -> tuple[ElementSnapshot, ...]:
        """Copies of ``elements`` with capacitor/inductor state advanced to this frame."""
        return tuple(
            e.with_state(self.dynamic_state[e.id]) if e.id in self.dynamic_state else e
            for e in elements
        )


def _require(snapshot: ElementSnapshot, condition: bool, message: str) -> None:
    if not condition:
        raise ValueError(f"element {snapshot.id!r} ({snapshot.kind}): {message}")


def build_circuit(
    elements: Iterable[ElementSnapshot],
    ground: NodeId,
    config: SolverConfig = DEFAULT_CONFIG,
    backend: str | LinearSolverBackend | None = None,
    resistive_batteries: Collection[Hashable] | None = None,
) -> LTACircuit:
    """
    Translate snapshots into core models. Raises ValueError on bad input.

    Batteries whose id is in ``resistive_batteries`` get their internal
    resistance, the others are ideal. None applies every internal resistance.
    """
    resistors, batteries, sources, capacitors, inductors = [], [], [], [], []

    for e in elements:
        _require(e, e.kind in KINDS, f"unknown kind, expected one of {KINDS}")
        _require(e, math.isfinite(e.value), f"parameter must be finite, got {e.value}")
        if e.kind == "resistor":
            _require(e, e.value >= 0, "resistance must be non-negative")
            resistors.append(StaticResistor(e.id, e.node0, e.node1, e.value))
        elif e.kind == "switch":
            resistance = 0.0 if e.closed else config.open_switch_resistance
            resistors.append(StaticResistor(e.id, e.node0, e.node1, resistance))
        elif e.kind == "battery":
            _require(e, e.internal_resistance >= 0, "internal resistance must be non-negative")
            ideal = resistive_batteries is not None and e.id not in resistive_batteries
            resistance = 0.0 if ideal else e.internal_resistance
            batteries.append(ResistiveBattery(e.id, e.node0, e.node1, e.value, resistance))
        elif e.kind == "current_source":
            sources.append(StaticCurrentSource(e.id, e.node0, e.node1, e.value))
        else:
            _require(e, e.value > 0, f"{e.kind} value must be positive")
            state = e.state if e.state is not None else DynamicElementState()
            _require(
                e,
                math.isfinite(state.voltage) and math.isfinite(state.current),
                f"carried state must be finite, got {state}",
            )
            if e.kind == "capacitor":
                capacitors.append(DynamicCapacitor(e.id, e.node0, e.node1, e.value, state.voltage, state.current))
            else:
                inductors.append(DynamicInductor(e.id, e.node0, e.node1, e.value, state.voltage, state.current))

    return LTACircuit.create(
        resistors,
        batteries,
        sources,
        capacitors,
        inductors,
        ground=ground,
        capacitor_series_resistance=config.capacitor_series_resistance,
        backend=backend if backend is not None else config.backend,
    )


def _run_frame(
    elements: tuple[ElementSnapshot, ...],
    ground: NodeId,
    dt: float,
    config: SolverConfig,
    backend: str | LinearSolverBackend | None,
    resistive_batteries: Collection[Hashable],
) -> tuple[SubdivisionHistory, LTAStateSet]:
    circuit = build_circuit(elements, ground, config, backend, resistive_batteries)
    initial = LTAState(circuit)
    controller = TimestepSubdivisions.from_config(config)

    if dt == 0:
        history = controller.step_unchecked(initial, config.paused_dt)
    else:
        history = controller.step_in_time_with_history(initial, dt)
    return history, LTAStateSet(history.substeps, initial)


def solve(
    elements: Iterable[ElementSnapshot],
    ground: NodeId,
    dt: float,
    tolerance: float | None = None,
    max_depth: int | None = None,
    *,
    config: SolverConfig | None = None,
    backend: str | LinearSolverBackend | None = None,
) -> FrameResult:
    """
    Solve one frame.

    Batteries are solved as ideal sources first. When a battery with a
    nonzero internal resistance carries a time-averaged current above
    ``config.battery_current_threshold``, or when the ideal system is
    singular, the frame is solved again with those internal resistances in
    place.

    Args:
        elements: Element snapshots; capacitors/inductors carry last frame's state
        ground: Reference node (0V)
        dt: Frame length in seconds. 0 runs a single unchecked step of
            ``config.paused_dt`` so readouts follow edits while paused.
        tolerance: Overrides ``config.tolerance``
        max_depth: Overrides ``config.max_depth``; 0 disables subdivision
        config: Solver configuration, ``DEFAULT_CONFIG`` if omitted
        backend: Linear system backend name or instance, overrides ``config.backend``

    Returns:
        FrameResult

    Raises:
        ValueError: invalid snapshots or negative dt
        SingularMatrix: floating node or inconsistent loop of voltage sources
        NumericDivergence: NaN/Inf in a solved value
    """
    if dt < 0 or not math.isfinite(dt):
        raise ValueError(f"dt must be finite and non-negative, got {dt}")

    config = config if config is not None else DEFAULT_CONFIG
    overrides = {}
    if tolerance is not None:
        overrides["tolerance"] = tolerance
    if max_depth is not None:
        overrides["max_depth"] = max_depth
    if overrides:
        config = config.replace(**overrides)

    elements = tuple(elements)
    with_resistance = frozenset(
        e.id for e in elements if e.kind == "battery" and e.internal_resistance > 0
    )
    try:
        # batteries start out ideal
        history, state_set = _run_frame(elements, ground, dt, config, backend, frozenset())
    except SingularMatrix:
        if not with_resistance:
            raise
        logger.debug("ideal batteries give a singular system; retrying with internal resistance")
        history, state_set = _run_frame(elements, ground, dt, config, backend, with_resistance)
    else:
        overloaded = frozenset(
            i for i in with_resistance
            if abs(state_set.time_average_current(i)) > config.battery_current_threshold
        )
        if overloaded:
            logger.debug(
                "battery current above %g A for %s; re-solving with internal resistance",
                config.battery_current_threshold, sorted(map(repr, overloaded)),
            )
            history, state_set = _run_frame(elements, ground, dt, config, backend, overloaded)

    final = state_set.final_state()

    ids: list[Hashable] = [e.id for e in elements]
    result = FrameResult(
        instantaneous_current={i: state_set.instantaneous_current(i) for i in ids},
        instantaneous_voltage={i: state_set.instantaneous_voltage(i) for i in ids},
        average_current={i: state_set.time_average_current(i) for i in ids},
        average_voltage={i: state_set.time_average_voltage(i) for i in ids},
        dynamic_state={
            model.id: DynamicElementState(model.voltage, model.current)
            for model in final.circuit.dynamic_models
        },
        node_voltages={
            node: v
            for node, v in final.solution.mna_solution.node_voltages.items()
            if not isinstance(node, SyntheticNode)
        },
        substeps=len(history.substeps),
        depth_exceeded=history.depth_exceeded > 0,
        state_set=state_set,
    )
    logger.debug(
        "frame dt=%g: %d elements, %d substeps, worst error %.3g",
        dt, len(elements), result.substeps, history.worst_error,
    )
    return result
