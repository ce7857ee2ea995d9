"""
Expense Tracker - Core Package

An offline-capable, single-user personal finance tracker.

DESIGN PRINCIPLES:
1. The stored state is the single source of truth
2. Every mutation is persisted before control returns
3. Derived numbers are recomputed, never cached
4. Bad input is rejected loudly, bad stored data is tolerated field by field
5. Storage backends are swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
