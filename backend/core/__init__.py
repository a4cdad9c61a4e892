"""Core building blocks for the NBA Edge projection engine.

This package contains pure, side-effect-free building blocks:

- ``engine_config`` — every tunable constant (core fraction, rank cut-offs, pick thresholds)
- ``odds_math``     — odds conversion, fair pricing, edge calculation
- ``records``       — frozen value records passed between pipeline stages
- ``names``         — canonical player-name keys for cross-source matching

Nothing in this package imports from ``backend.services``.
All modules are side-effect-free and unit-testable in isolation.
"""
