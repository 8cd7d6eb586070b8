"""
Booking Ledger for SkilLink sessions

This module provides:
- Session booking requests between a provider and a seeker
- Half-open interval conflict detection across both participants' calendars
- Status lifecycle: pending → confirmed → completed, or cancelled
- Credit settlement when a session completes
"""

from .models import (
    BookingStatus,
    Booking,
    BookingView,
)
from .service import BookingLedger

__all__ = [
    "BookingStatus",
    "Booking",
    "BookingView",
    "BookingLedger",
]
