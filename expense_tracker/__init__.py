"""
Expense Tracker - Source Package

Core of a personal expense-tracking application: owner-scoped expense
records, monthly budget summaries and budget-usage reporting.

DESIGN PRINCIPLES:
1. Every read and write is scoped to its owner
2. Money is Decimal end to end, floats only at the wire boundary
3. Summaries are recomputed on every request, never cached
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
