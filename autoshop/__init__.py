"""
Auto Shop Record Store - Source Package

Persistence and domain-record layer for a small auto-repair shop:
clients, services, stock, a financial ledger and appointments.

DESIGN PRINCIPLES:
1. One namespace per collection, one JSON array per namespace
2. Faults are reported, never raised to the presentation layer
3. Storage substrate is swappable
4. Every mutation is auditable
"""

__version__ = "1.0.0"
__author__ = "Auto Shop Team"
