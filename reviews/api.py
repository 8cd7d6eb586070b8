import logging

from fastapi import APIRouter, Depends, HTTPException, status

from api.deps import Services, get_current_user, get_services
from core.errors import SkilLinkError
from core.users import User

from .models import CreateReviewRequest, ReviewResponse, ReviewSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def add_review(
    request: CreateReviewRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> ReviewResponse:
    try:
        review = services.reviews.add_review(user.id, request)
    except SkilLinkError as e:
        logger.warning("Review by %s of %s rejected: %s", user.id, request.reviewee_id, e)
        raise HTTPException(status_code=e.status_code, detail=str(e))

    logger.info("Review %s submitted by %s", review.id, user.id)
    return ReviewResponse(message="Review submitted successfully", review=review)


@router.get("/{user_id}", response_model=ReviewSummary)
def get_reviews(user_id: str, services: Services = Depends(get_services)) -> ReviewSummary:
    try:
        return services.reviews.list_for_user(user_id)
    except SkilLinkError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
