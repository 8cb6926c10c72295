"""Default configuration values for the circuit analysis engine.

All tunable constants of the solver live here so the rest of the package
never hard-codes them.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class SolverConfig:
    """Configuration for one frame of linear transient analysis.

    Attributes:
        tolerance: Largest accepted difference (in Amperes) between the coarse
            and fine characteristic arrays of a candidate step. The metric is
            the maximum absolute difference over all capacitor and inductor
            currents. Default 1e-5.
        max_depth: Number of times a frame may be bisected before the fine
            estimate is accepted regardless of error. Default 8.
        min_dt: Steps at or below this size are accepted without error
            checking. Default 0.0 (disabled).
        paused_dt: Step used when a frame is solved with dt == 0, so that
            readouts follow topology edits while the clock is stopped.
            Default 1e-6 seconds.
        capacitor_series_resistance: Resistance placed in series with each
            capacitor companion, between the synthetic node and node1.
            Default 1e-4 Ohms. Zero is allowed.
        open_switch_resistance: Resistance of an open switch. Large but finite
            so that an open branch carries a tiny current instead of NaN.
            Default 1e9 Ohms.
        battery_current_threshold: Time-averaged current (in Amperes) above
            which a battery is re-solved with its internal resistance. Below
            it batteries are ideal. Default 1e4 A.
        backend: Name of the linear system backend, see
            ``pycompanion.mna.backend.get_backend``. Default "jax".
    """

    tolerance: float = 1e-5
    max_depth: int = 8
    min_dt: float = 0.0
    paused_dt: float = 1e-6
    capacitor_series_resistance: float = 1e-4
    open_switch_resistance: float = 1e9
    battery_current_threshold: float = 1e4
    backend: str = "jax"

    def __post_init__(self):
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be non-negative, got {self.tolerance}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.paused_dt <= 0:
            raise ValueError(f"paused_dt must be positive, got {self.paused_dt}")
        if self.capacitor_series_resistance < 0:
            raise ValueError("capacitor_series_resistance must be non-negative")
        if self.open_switch_resistance <= 0:
            raise ValueError("open_switch_resistance must be positive")
        if not self.battery_current_threshold > 0:
            raise ValueError(
                f"battery_current_threshold must be positive, got {self.battery_current_threshold}"
            )

    def replace(self, **changes) -> SolverConfig:
        """Return a copy with the given fields changed."""
        return replace(self, **changes)


DEFAULT_CONFIG = SolverConfig()
