"""
Credit Ledger for SkilLink virtual credits

This module provides:
- Append-only credit transactions with balance snapshots
- Fixed per-action awards and user-initiated redemptions
- Lazy signup initialization of balances
- Replay checks that the cached balance is a fold of the log
"""

from .models import (
    CreditAction,
    CREDIT_ACTIONS,
    CreditTransaction,
    CreditSummary,
)
from .service import CreditLedger, Posting, SIGNUP_CREDITS

__all__ = [
    "CreditAction",
    "CREDIT_ACTIONS",
    "CreditTransaction",
    "CreditSummary",
    "CreditLedger",
    "Posting",
    "SIGNUP_CREDITS",
]
