"""
envs - Gymnasium Environment Wrappers

This package contains Gymnasium-compatible environment wrappers
for training RL sellers in the airline seats game.

The environments wrap the core engine to provide:
- Standard Gym API (reset, step, render)
- Observation/action space definitions
- Per-transition rewards from the engine's running PnL
"""

__version__ = "1.0.0"
