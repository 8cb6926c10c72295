"""
Test: solver configuration and logging controls.
"""
import logging
import pytest


def test_defaults():
    from pycompanion import DEFAULT_CONFIG

    assert DEFAULT_CONFIG.tolerance == 1e-5
    assert DEFAULT_CONFIG.max_depth == 8
    assert DEFAULT_CONFIG.battery_current_threshold == 1e4
    assert DEFAULT_CONFIG.backend == "jax"


def test_replace_returns_copy():
    from pycompanion import DEFAULT_CONFIG

    tighter = DEFAULT_CONFIG.replace(tolerance=1e-8)
    assert tighter.tolerance == 1e-8
    assert DEFAULT_CONFIG.tolerance == 1e-5
    assert tighter.max_depth == DEFAULT_CONFIG.max_depth


@pytest.mark.parametrize("kwargs", [
    {"tolerance": -1e-3},
    {"max_depth": -1},
    {"paused_dt": 0.0},
    {"capacitor_series_resistance": -1.0},
    {"open_switch_resistance": 0.0},
    {"battery_current_threshold": 0.0},
    {"battery_current_threshold": float("nan")},
])
def test_invalid_values(kwargs):
    from pycompanion import SolverConfig

    with pytest.raises(ValueError):
        SolverConfig(**kwargs)


def test_frozen():
    import dataclasses
    from pycompanion import DEFAULT_CONFIG

    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_CONFIG.tolerance = 1.0


def test_log_level_roundtrip():
    from pycompanion.logging import logger, set_log_level, enable_debug_logging

    try:
        enable_debug_logging()
        assert logger.level == logging.DEBUG
        assert all(h.level == logging.DEBUG for h in logger.handlers)
    finally:
        set_log_level(logging.WARNING)
    assert logger.level == logging.WARNING


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
