"""
PocketPlan - Source Package

A personal budgeting client for a REST finance backend: passwordless
login, spending categories, monthly budget allocations, and checking /
savings transactions with running totals.

DESIGN PRINCIPLES:
1. The backend owns the data; the client mirrors it in memory
2. Aggregates are derived, never stored
3. Failures become error flags, never crashes
4. Every write is logged
5. Dependencies are injected, never global
"""

__version__ = "1.0.0"
__author__ = "PocketPlan Team"
