import threading
from typing import Optional
from uuid import uuid4

from bookings.models import BookingStatus
from bookings.service import BookingLedger
from core.clock import Clock, utc_now
from core.errors import ConflictError, NotFoundError, ValidationError
from core.storage import InMemoryRepository, Repository
from core.users import UserDirectory
from skills.service import SkillCatalog

from .models import (
    MAX_RATING,
    MIN_RATING,
    REPUTATION_LEVELS,
    CreateReviewRequest,
    Reputation,
    ReputationLevel,
    ReputationStats,
    Review,
    ReviewStats,
    ReviewSummary,
    ReviewView,
)

ANONYMOUS = "Anonymous"


class ReviewService:
    def __init__(
        self,
        users: UserDirectory,
        bookings: BookingLedger,
        storage: Optional[Repository[Review]] = None,
        clock: Clock = utc_now,
        skills: Optional[SkillCatalog] = None,
    ):
        self.users = users
        self.bookings = bookings
        self.storage = storage if storage is not None else InMemoryRepository()
        self.clock = clock
        self.skills = skills
        self._lock = threading.Lock()

    def add_review(self, reviewer_id: str, request: CreateReviewRequest) -> ReviewView:
        if isinstance(request.rating, bool) or not MIN_RATING <= request.rating <= MAX_RATING:
            raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
        if reviewer_id == request.reviewee_id:
            raise ValidationError("Cannot review yourself")
        self.users.find_user(request.reviewee_id)

        with self._lock:
            if request.booking_id is not None:
                self._check_booking(reviewer_id, request)

            review = Review(
                id=uuid4(),
                reviewer_id=reviewer_id,
                reviewee_id=request.reviewee_id,
                booking_id=request.booking_id,
                skill_id=request.skill_id,
                rating=request.rating,
                comment=request.comment or "",
                created_at=self.clock(),
            )
            self.storage.insert(review)

        return self._view(review)

    def list_for_user(self, user_id: str) -> ReviewSummary:
        self.users.find_user(user_id)
        received = self.storage.find_by_predicate(lambda r: r.reviewee_id == user_id)

        total = len(received)
        avg = round(sum(r.rating for r in received) / total, 1) if total else 0.0
        distribution = {
            rating: sum(1 for r in received if r.rating == rating)
            for rating in range(MAX_RATING, MIN_RATING - 1, -1)
        }
        return ReviewSummary(
            reviews=[self._view(r) for r in received],
            stats=ReviewStats(total_reviews=total, avg_rating=avg, rating_distribution=distribution),
        )

    def reputation(self, user_id: str) -> Reputation:
        """Weighted 0-100 score: half average rating, then completed sessions and skills.

        Sessions saturate at 100 and skills at 20.
        """
        user = self.users.find_user(user_id)
        received = self.storage.find_by_predicate(lambda r: r.reviewee_id == user_id)
        avg = sum(r.rating for r in received) / len(received) if received else 0.0
        completed = sum(
            1 for b in self.bookings.list_for_user(user_id) if b.status == BookingStatus.COMPLETED
        )
        skill_count = self.skills.count_for_user(user_id) if self.skills else 0

        score = (
            avg * 10 * 0.5
            + min(completed / 10, 10) * 0.3 * 100
            + min(skill_count / 2, 10) * 0.2 * 100
        ) / 10
        level = next(
            (level for floor, level in REPUTATION_LEVELS if score >= floor),
            ReputationLevel.NEWCOMER,
        )
        return Reputation(
            user_id=user.id,
            user_name=user.name,
            reputation_score=round(score, 1),
            level=level,
            stats=ReputationStats(
                avg_rating=round(avg, 1),
                total_reviews=len(received),
                completed_sessions=completed,
                total_skills=skill_count,
            ),
        )

    def _check_booking(self, reviewer_id: str, request: CreateReviewRequest) -> None:
        try:
            booking = self.bookings.get(request.booking_id)
        except NotFoundError:
            raise ValidationError("Invalid booking or not completed yet")

        eligible = (
            booking.status == BookingStatus.COMPLETED
            and booking.involves(reviewer_id)
            and booking.involves(request.reviewee_id)
        )
        if not eligible:
            raise ValidationError("Invalid booking or not completed yet")

        already = self.storage.find_by_predicate(
            lambda r: r.booking_id == request.booking_id and r.reviewer_id == reviewer_id
        )
        if already:
            raise ConflictError("Already reviewed this session")

    def _view(self, review: Review) -> ReviewView:
        reviewer = self.users.get(review.reviewer_id)
        return ReviewView(**review.model_dump(), reviewer_name=reviewer.name if reviewer else ANONYMOUS)
