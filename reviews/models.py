from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict

MIN_RATING = 1
MAX_RATING = 5


class CreateReviewRequest(BaseModel):
    reviewee_id: str
    booking_id: Optional[UUID] = None
    skill_id: Optional[str] = None
    rating: int
    comment: Optional[str] = None


class Review(BaseModel):
    id: UUID
    reviewer_id: str
    reviewee_id: str
    booking_id: Optional[UUID] = None
    skill_id: Optional[str] = None
    rating: int
    comment: str = ""
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReviewView(Review):
    reviewer_name: str


class ReviewStats(BaseModel):
    total_reviews: int
    avg_rating: float
    rating_distribution: dict[int, int]


class ReviewSummary(BaseModel):
    reviews: list[ReviewView]
    stats: ReviewStats


class ReviewResponse(BaseModel):
    message: str
    review: ReviewView


class ReputationLevel(str, Enum):
    NEWCOMER = "Newcomer"
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"


# (minimum score, level), checked highest first
REPUTATION_LEVELS = [
    (80, ReputationLevel.EXPERT),
    (60, ReputationLevel.ADVANCED),
    (40, ReputationLevel.INTERMEDIATE),
    (20, ReputationLevel.BEGINNER),
]


class ReputationStats(BaseModel):
    avg_rating: float
    total_reviews: int
    completed_sessions: int
    total_skills: int


class Reputation(BaseModel):
    user_id: str
    user_name: str
    reputation_score: float
    level: ReputationLevel
    stats: ReputationStats
