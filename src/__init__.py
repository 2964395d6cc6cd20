"""
Spend to Save - Source Package

A small personal ledger that asks you to stop and think before logging
a frivolous purchase, and suggests setting 10% of it aside as savings.

DESIGN PRINCIPLES:
1. Classify → Enter amount → Decide on savings → Record
2. Totals always equal the sum of the history
3. Bad stored data costs one field, never the whole ledger
4. Nothing is cleared without explicit confirmation
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Spend to Save Team"
