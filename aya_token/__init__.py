"""
AYA Token Ledger

A fungible token ledger with role-based administration, an account
blacklist and hash-chained audit trail of every state change.
"""

__version__ = "1.0.0"
