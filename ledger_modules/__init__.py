"""
Ledger modules: producers (sales, payables, receivables, expenses) and
reporting built on top of ``ledger_kernel``.

Each producer module ships its posting rules in ``profiles.py``; the
orchestrator registers them and subscribes the posting engine to the bus.
"""
