"""
Test: trapezoidal companion models.

Capacitor:  G_eq = 2C/dt, I_eq = G_eq * v + i
Inductor:   R_eq = 2L/dt, V_eq = R_eq * i + v

This validates:
- Companion parameters for a given prior state
- Equivalent circuit topology (synthetic node, current element)
- Rejection of non-positive dt and element values
"""
import pytest


class TestCapacitorCompanion:
    def test_parameters(self):
        from pycompanion.mna import ElementKind
        from pycompanion.transient import DynamicCapacitor, capacitor_companion, SyntheticNode

        cap = DynamicCapacitor("C1", "a", "b", capacitance=1e-3, voltage=2.0, current=0.5)
        eq = capacitor_companion(cap, dt=1e-3)

        conductance, source, series = eq.elements
        s = SyntheticNode("C1", 0)

        # G_eq = 2 * 1e-3 / 1e-3 = 2 S
        assert conductance.kind is ElementKind.RESISTOR
        assert abs(conductance.resistance - 0.5) < 1e-12
        assert (conductance.node0, conductance.node1) == ("a", s)

        # I_eq = 2 * 2 + 0.5
        assert source.kind is ElementKind.CURRENT_SOURCE
        assert abs(source.current - 4.5) < 1e-12
        assert (source.node0, source.node1) == (s, "a")

        assert eq.current_element is series
        assert (series.node0, series.node1) == (s, "b")
        assert eq.voltage_nodes == ("a", s)

    def test_series_resistance(self):
        from pycompanion.mna import Category
        from pycompanion.transient import DynamicCapacitor, capacitor_companion

        cap = DynamicCapacitor("C1", "a", "b", 1e-3)
        assert capacitor_companion(cap, 1e-3).current_element.category is Category.AUXILIARY

        series = capacitor_companion(cap, 1e-3, series_resistance=1e-4).current_element
        assert series.category is Category.CONDUCTANCE
        assert series.resistance == 1e-4

    def test_conductance_grows_as_dt_shrinks(self):
        from pycompanion.transient import capacitor_conductance

        assert capacitor_conductance(1e-6, 1e-3) == pytest.approx(2e-3)
        assert capacitor_conductance(1e-6, 1e-6) == pytest.approx(2.0)

    @pytest.mark.parametrize("dt", [0.0, -1e-3])
    def test_rejects_bad_dt(self, dt):
        from pycompanion.transient import DynamicCapacitor, capacitor_companion

        with pytest.raises(ValueError):
            capacitor_companion(DynamicCapacitor("C1", "a", "b", 1e-3), dt)

    def test_rejects_zero_capacitance(self):
        from pycompanion.transient import DynamicCapacitor, capacitor_companion

        with pytest.raises(ValueError):
            capacitor_companion(DynamicCapacitor("C1", "a", "b", 0.0), 1e-3)


class TestInductorCompanion:
    def test_parameters(self):
        from pycompanion.mna import ElementKind
        from pycompanion.transient import DynamicInductor, inductor_companion, SyntheticNode

        ind = DynamicInductor("L1", "a", "b", inductance=0.1, voltage=1.0, current=0.25)
        eq = inductor_companion(ind, dt=0.01)

        series, source = eq.elements
        s = SyntheticNode("L1", 0)

        # R_eq = 2 * 0.1 / 0.01 = 20 ohm
        assert series.kind is ElementKind.RESISTOR
        assert abs(series.resistance - 20.0) < 1e-12
        assert (series.node0, series.node1) == ("a", s)

        # V_eq = 20 * 0.25 + 1
        assert source.kind is ElementKind.BATTERY
        assert abs(source.voltage - 6.0) < 1e-12
        assert (source.node0, source.node1) == (s, "b")

        assert eq.current_element is source
        assert eq.voltage_nodes == ("a", "b")

    def test_resistance(self):
        from pycompanion.transient import inductor_resistance

        assert inductor_resistance(1.0, 0.5) == pytest.approx(4.0)

    def test_rejects_bad_values(self):
        from pycompanion.transient import DynamicInductor, inductor_companion

        with pytest.raises(ValueError):
            inductor_companion(DynamicInductor("L1", "a", "b", 0.1), 0.0)
        with pytest.raises(ValueError):
            inductor_companion(DynamicInductor("L1", "a", "b", -0.1), 1e-3)


class TestStaticEquivalents:
    def test_ideal_battery(self):
        from pycompanion.transient import ResistiveBattery

        eq = ResistiveBattery("B1", "0", "1", 9.0).equivalent()
        assert len(eq.elements) == 1
        assert eq.current_element.voltage == 9.0

    def test_battery_with_internal_resistance(self):
        from pycompanion.transient import ResistiveBattery, SyntheticNode

        eq = ResistiveBattery("B1", "0", "1", 9.0, internal_resistance=0.5).equivalent()
        ideal, series = eq.elements
        s = SyntheticNode("B1", 0)

        assert (ideal.node0, ideal.node1) == ("0", s)
        assert (series.node0, series.node1) == (s, "1")
        assert series.resistance == 0.5
        assert eq.current_element is ideal
        assert eq.voltage_nodes == ("0", "1")

    def test_dynamic_state_is_replaced_not_mutated(self):
        from pycompanion.transient import DynamicCapacitor

        cap = DynamicCapacitor("C1", "a", "b", 1e-3)
        charged = cap.with_state(3.0, 0.1)

        assert (cap.voltage, cap.current) == (0.0, 0.0)
        assert (charged.voltage, charged.current) == (3.0, 0.1)
        assert charged.capacitance == cap.capacitance


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
