"""
Example: Voltage Divider

Demonstrates the voltage divider rule: V_out = V_in * R2 / (R1 + R2)

Two examples:
1. Simple 2-resistor divider solved directly with MNA
2. 4-resistor divider chain solved as one frame, with both backends

Components used: resistor, battery (MNA); R, Battery (snapshots)
"""
from pycompanion import solve, R, Battery
from pycompanion.mna import MNACircuit, resistor, battery


def simulate_simple_divider(V_in=10.0, R1=10000.0, R2=10000.0):
    """Solve a simple voltage divider and return the output voltage.

    Circuit:
        Vs ---[R1]---+---[R2]--- GND
                     |
                    Vout
    """
    circuit = MNACircuit(
        (
            battery("gnd", "top", V_in),
            resistor("top", "mid", R1),
            resistor("mid", "gnd", R2),
        ),
        ground="gnd",
    )
    solution = circuit.solve()
    return solution.node_voltage("mid")


def simulate_chain_divider(V_in=10.0, R_val=10000.0, backend="jax"):
    """Solve a 4-resistor chain divider and return tap voltages.

    Circuit:
        Vs ---[R1]---+---[R2]---+---[R3]---+---[R4]--- GND
                     |          |          |
                   tap1       tap2       tap3
    """
    elements = [
        Battery("vs", "gnd", "top", V_in),
        R("R1", "top", "tap1", R_val),
        R("R2", "tap1", "tap2", R_val),
        R("R3", "tap2", "tap3", R_val),
        R("R4", "tap3", "gnd", R_val),
    ]
    result = solve(elements, ground="gnd", dt=1 / 60, backend=backend)
    return {tap: result.node_voltages[tap] for tap in ("tap1", "tap2", "tap3")}


def main():
    print("=" * 60)
    print("Voltage Divider Example")
    print("=" * 60)

    print("\n1. Simple Voltage Divider (R1 = R2 = 10k)")
    print("-" * 40)
    V_in = 10.0
    v_out = simulate_simple_divider(V_in=V_in, R1=10000.0, R2=10000.0)
    expected = V_in * 0.5
    print(f"   Input voltage:    {V_in:.2f} V")
    print(f"   Output voltage:   {v_out:.4f} V")
    print(f"   Expected (50%):   {expected:.2f} V")
    print(f"   Error:            {abs(v_out - expected):.6f} V")

    print("\n2. Unequal Resistors (R1=10k, R2=20k)")
    print("-" * 40)
    v_out_2 = simulate_simple_divider(V_in=V_in, R1=10000.0, R2=20000.0)
    expected_2 = V_in * 20000 / (10000 + 20000)
    print(f"   Output voltage:   {v_out_2:.4f} V")
    print(f"   Expected (2/3):   {expected_2:.4f} V")

    print("\n3. 4-Resistor Chain, double precision vs exact")
    print("-" * 40)
    numeric = simulate_chain_divider(V_in=V_in, backend="jax")
    exact = simulate_chain_divider(V_in=V_in, backend="sympy")
    for tap, fraction in (("tap1", 0.75), ("tap2", 0.50), ("tap3", 0.25)):
        print(
            f"   {tap}: {numeric[tap]:.12f} V (exact {exact[tap]:.12f}, "
            f"expected {V_in * fraction:.2f})"
        )

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
