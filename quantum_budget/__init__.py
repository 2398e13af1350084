"""
Quantum Budget - Source Package

The analytical core of a personal income/expense tracker: a procedurally
generated coupling network whose entropy drives a live risk indicator,
a damped-oscillator stability monitor over that indicator, and
next-period income/expense forecasting.

DESIGN PRINCIPLES:
1. The core is pure: same inputs, same outputs
2. Degenerate input gives a defined value, never an exception
3. All mutable state belongs to the orchestrator
4. Collaborators (random source, clock, settings) are passed in
5. Every orchestrator step is auditable
"""

__version__ = "1.0.0"
__author__ = "Quantum Budget Team"
