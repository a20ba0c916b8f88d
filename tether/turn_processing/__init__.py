"""Turn resolution helpers.

Everything in this package is pure: functions take the current position, grid,
and inputs and return new values without touching the engine's state, so the
same pipeline runs for live ticks and for tests.
"""
