"""
Ledger Kernel

An append-only, double-entry bookkeeping core with:
- Balanced journal posting
- Balances derived from the journal on every read
- Period lock enforcement
- Event-driven posting rules
"""

__version__ = "0.1.0"
