from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from bookings.service import BookingLedger
from core.clock import Clock, utc_now
from core.config import Settings
from core.users import User, UserDirectory
from credit_ledger.service import CreditLedger
from reviews.service import ReviewService
from skills.service import SkillCatalog


@dataclass
class Services:
    users: UserDirectory
    credits: CreditLedger
    bookings: BookingLedger
    skills: SkillCatalog
    reviews: ReviewService


def build_services(settings: Settings, clock: Clock = utc_now) -> Services:
    users = UserDirectory(clock=clock)
    credits = CreditLedger(users, clock=clock, signup_credits=settings.signup_credits)
    bookings = BookingLedger(
        users, credits, clock=clock, default_duration=settings.default_session_minutes
    )
    skills = SkillCatalog(users, clock=clock)
    reviews = ReviewService(users, bookings, clock=clock, skills=skills)
    return Services(
        users=users, credits=credits, bookings=bookings, skills=skills, reviews=reviews
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    services: Services = Depends(get_services),
) -> User:
    # Token issuance lives in the account service; it forwards the caller as X-User-Id.
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No user identity provided")

    user = services.users.get(x_user_id.strip())
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user
