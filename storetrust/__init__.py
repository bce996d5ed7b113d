"""
storetrust
==========
Recipient management for hierarchical encrypted secret stores.

Provides:
- Recipient resolution (user supplied key reference -> fingerprint)
- Key expiration auditing
- Confirm-then-commit add/remove of recipients
- Checksum drift detection and trust reconciliation across mount points
- Pluggable store backends (SQLite default, in-memory)
"""

__version__ = "0.3.0"
