"""Session reviews: ratings left by participants after a completed booking."""

from .models import Reputation, Review, ReviewView, ReviewStats, ReviewSummary
from .service import ReviewService

__all__ = [
    "Reputation",
    "Review",
    "ReviewView",
    "ReviewStats",
    "ReviewSummary",
    "ReviewService",
]
