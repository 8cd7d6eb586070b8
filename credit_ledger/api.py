import logging

from fastapi import APIRouter, Depends, HTTPException

from api.deps import Services, get_current_user, get_services
from core.errors import SkilLinkError
from core.users import User

from .models import AwardCreditsRequest, CreditResponse, CreditSummary, RedeemCreditsRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/credits", tags=["Credits"])


@router.get("", response_model=CreditSummary)
def get_credits(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> CreditSummary:
    try:
        return services.credits.get_summary(user.id)
    except SkilLinkError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/award", response_model=CreditResponse)
def award_credits(
    request: AwardCreditsRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> CreditResponse:
    try:
        transaction = services.credits.award_for_action(user.id, request.action, request.related_id)
    except SkilLinkError as e:
        logger.warning("Award %s for user %s rejected: %s", request.action, user.id, e)
        raise HTTPException(status_code=e.status_code, detail=str(e))

    verb = "Earned" if transaction.amount >= 0 else "Spent"
    logger.info("User %s %s %d credits for %s", user.id, verb.lower(), abs(transaction.amount), transaction.reason)
    return CreditResponse(
        message=f"{verb} {abs(transaction.amount)} credits",
        transaction=transaction,
        new_balance=transaction.balance_after,
    )


@router.post("/redeem", response_model=CreditResponse)
def redeem_credits(
    request: RedeemCreditsRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> CreditResponse:
    try:
        transaction = services.credits.redeem(user.id, request.amount, request.reason)
    except SkilLinkError as e:
        logger.warning("Redemption of %s credits for user %s rejected: %s", request.amount, user.id, e)
        raise HTTPException(status_code=e.status_code, detail=str(e))

    logger.info("User %s redeemed %d credits", user.id, request.amount)
    return CreditResponse(
        message=f"Redeemed {request.amount} credits",
        transaction=transaction,
        new_balance=transaction.balance_after,
    )
