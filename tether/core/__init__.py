"""Core gameplay primitives (grid, spark state, snapshots, and events).

Kept free of any rendering or input-device concerns so it can be reused by the
tick scheduler, a UI host, and tests.
"""
