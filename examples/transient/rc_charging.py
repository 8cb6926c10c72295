"""
Example: RC charging, one solve() per animation frame

A 9V battery charges a 10 mF capacitor through 10 ohms (tau = 100 ms).
Each 1/60 s frame is subdivided adaptively; the capacitor state returned
by one frame is fed into the next via FrameResult.next_snapshots.

Shows the difference between the end-of-frame (instantaneous) current and
the frame-averaged current that a display would use.

Components used: Battery, R, C, Switch
"""
import math

from pycompanion import solve, Battery, R, C, Switch


def build(closed):
    return (
        Battery("B", "gnd", "top", 9.0),
        Switch("S", "top", "a", closed=closed),
        R("R", "a", "cap", 10.0),
        C("C", "cap", "gnd", 0.01),
    )


def run(frames=30, dt=1 / 60):
    """Close the switch at t=0 and step ``frames`` frames."""
    elements = build(closed=True)
    rows = []
    for n in range(1, frames + 1):
        result = solve(elements, ground="gnd", dt=dt)
        elements = result.next_snapshots(elements)
        rows.append((
            n * dt,
            result.instantaneous_voltage["C"],
            result.instantaneous_current["C"],
            result.average_current["C"],
            result.substeps,
        ))
    return rows


def main():
    print("=" * 72)
    print("RC charging (R = 10 ohm, C = 10 mF, tau = 100 ms)")
    print("=" * 72)
    print(f"{'t [s]':>8} {'V_C':>10} {'expected':>10} {'I_end':>10} {'I_avg':>10} {'substeps':>9}")
    for t, v, i_end, i_avg, substeps in run():
        expected = 9.0 * (1 - math.exp(-t / 0.1))
        print(f"{t:8.4f} {v:10.5f} {expected:10.5f} {i_end:10.5f} {i_avg:10.5f} {substeps:9d}")
    print("=" * 72)


if __name__ == "__main__":
    main()
