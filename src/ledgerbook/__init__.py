"""
Ledgerbook - Source Package

A small personal ledger for recording daily income and expenses,
with period statistics and a Google Sheets backed remote copy.

DESIGN PRINCIPLES:
1. Local cache answers every read
2. Remote sync is best-effort and never blocks the user
3. Aggregation is pure and total over its inputs
4. Storage backends are swappable
"""

__version__ = "1.0.0"
__author__ = "Ledgerbook Team"
