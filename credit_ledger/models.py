from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict


class CreditAction(str, Enum):
    SESSION_COMPLETE_PROVIDER = "SESSION_COMPLETE_PROVIDER"
    SESSION_COMPLETE_SEEKER = "SESSION_COMPLETE_SEEKER"
    PROFILE_COMPLETE = "PROFILE_COMPLETE"
    FIRST_REVIEW = "FIRST_REVIEW"
    PROJECT_CREATE = "PROJECT_CREATE"
    PROJECT_JOIN = "PROJECT_JOIN"
    SKILL_ADD = "SKILL_ADD"
    REFERRAL = "REFERRAL"
    SIGNUP_BONUS = "SIGNUP_BONUS"


CREDIT_ACTIONS: dict[CreditAction, int] = {
    CreditAction.SESSION_COMPLETE_PROVIDER: 20,
    CreditAction.SESSION_COMPLETE_SEEKER: -10,
    CreditAction.PROFILE_COMPLETE: 10,
    CreditAction.FIRST_REVIEW: 5,
    CreditAction.PROJECT_CREATE: -5,
    CreditAction.PROJECT_JOIN: 0,
    CreditAction.SKILL_ADD: 2,
    CreditAction.REFERRAL: 15,
    CreditAction.SIGNUP_BONUS: 50,
}

REDEMPTION_REASON = "CREDIT_REDEMPTION"


class AwardCreditsRequest(BaseModel):
    action: str = Field(..., description="Action tag from the credit action table")
    related_id: Optional[str] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {"action": "SKILL_ADD", "related_id": "skill-42"}
    })


class RedeemCreditsRequest(BaseModel):
    amount: int = Field(..., description="Credits to spend, must be positive")
    reason: Optional[str] = None


class CreditTransaction(BaseModel):
    id: UUID
    user_id: str
    amount: int
    reason: str
    related_id: Optional[str] = None
    balance_before: int
    balance_after: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CreditSummary(BaseModel):
    user_id: str
    balance: int
    transactions: list[CreditTransaction]


class CreditResponse(BaseModel):
    message: str
    transaction: CreditTransaction
    new_balance: int
