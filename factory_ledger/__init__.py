"""
Factory Ledger - Source Package

An expense ledger with receipt attachments and multi-format reporting
for the two SS Mudyf factories.

DESIGN PRINCIPLES:
1. The ledger is an owned object, never ambient state
2. Validation reports problems, it never silently fixes them
3. Every mutation ends in an explicit commit to storage
4. Reports are pure projections and never touch the ledger
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "SS Mudyf Accounting Team"
