"""
Test: instantaneous and time-averaged readouts of a subdivided frame.

average = sum(value_i * dt_i) / sum(dt_i) over the accepted substeps, while
instantaneous values come from the last substep only.
"""
import math
import pytest


class FakeSolution:
    """Stands in for an LTASolution with fixed per-id readouts."""

    def __init__(self, currents, voltages=None, nodes=None):
        self.currents = currents
        self.voltages = voltages or {}
        self.nodes = nodes or {}

    def current_for(self, element_id):
        return self.currents[element_id]

    def voltage_for(self, element_id):
        return self.voltages[element_id]

    def node_voltage(self, node):
        return self.nodes[node]


def _state_set(*steps, initial=None):
    from pycompanion.transient import LTAState, LTAStateSet, Substep

    return LTAStateSet(
        tuple(Substep(LTAState(None, solution), dt) for solution, dt in steps),
        initial,
    )


class TestAverages:
    def test_weighted_by_substep_length(self):
        states = _state_set(
            (FakeSolution({"C": 4.0}, {"C": 1.0}), 0.25),
            (FakeSolution({"C": 0.0}, {"C": 3.0}), 0.75),
        )
        assert states.time_average_current("C") == pytest.approx(1.0)
        assert states.time_average_voltage("C") == pytest.approx(2.5)
        assert states.total_time == pytest.approx(1.0)

    def test_instantaneous_is_last_substep(self):
        states = _state_set(
            (FakeSolution({"C": 4.0}, {"C": 1.0}, {"n": 7.0}), 0.25),
            (FakeSolution({"C": 0.5}, {"C": 3.0}, {"n": 9.0}), 0.75),
        )
        assert states.instantaneous_current("C") == 0.5
        assert states.instantaneous_voltage("C") == 3.0
        assert states.node_voltage("n") == 9.0

    def test_single_substep_average_equals_instantaneous(self):
        states = _state_set((FakeSolution({"R": 2.0}, {"R": 6.0}), 0.1))
        assert states.time_average_current("R") == pytest.approx(states.instantaneous_current("R"))

    def test_non_finite_average_raises(self):
        from pycompanion import NumericDivergence

        states = _state_set(
            (FakeSolution({"C": float("inf")}), 0.5),
            (FakeSolution({"C": 1.0}), 0.5),
        )
        with pytest.raises(NumericDivergence):
            states.time_average_current("C")


class TestEmptySet:
    def test_falls_back_to_initial_state(self):
        from pycompanion.transient import LTAState

        initial = LTAState(None, FakeSolution({"R": 1.5}, {"R": 3.0}))
        states = _state_set(initial=initial)

        assert states.final_state() is initial
        assert states.total_time == 0.0
        assert states.time_average_current("R") == 1.5
        assert states.instantaneous_voltage("R") == 3.0

    def test_nothing_to_report(self):
        states = _state_set()
        with pytest.raises(ValueError):
            states.final_state()

    def test_unsolved_initial_state(self):
        from pycompanion.transient import LTAState

        states = _state_set(initial=LTAState(None))
        with pytest.raises(ValueError):
            states.instantaneous_current("R")


def test_rc_average_lies_between_endpoints():
    """A decaying charging current averages above its end-of-frame value."""
    from pycompanion.transient import LTACircuit, StaticResistor, ResistiveBattery, DynamicCapacitor

    v, r, c = 5.0, 10.0, 1e-2
    circuit = LTACircuit.create(
        resistors=[StaticResistor("R", "1", "2", r)],
        batteries=[ResistiveBattery("B", "0", "1", v)],
        capacitors=[DynamicCapacitor("C", "2", "0", c, current=v / r)],
    )
    states = circuit.solve_with_subdivisions(1 / 60)

    start = v / r
    end = states.instantaneous_current("C")
    average = states.time_average_current("C")

    assert end < average < start
    assert end == pytest.approx(start * math.exp(-(1 / 60) / (r * c)), abs=1e-3)
    assert states.total_time == pytest.approx(1 / 60)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
