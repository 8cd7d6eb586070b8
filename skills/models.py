from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

MIN_PROFICIENCY = 1
MAX_PROFICIENCY = 5
DEFAULT_PROFICIENCY = 3


class SkillType(str, Enum):
    OFFERING = "offering"
    SEEKING = "seeking"


class AddSkillRequest(BaseModel):
    skill_name: str = Field(..., min_length=1)
    type: SkillType
    proficiency: Optional[int] = None


class Skill(BaseModel):
    id: UUID
    user_id: str
    skill_name: str
    type: SkillType
    proficiency: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SkillListing(BaseModel):
    offering: list[Skill]
    seeking: list[Skill]


class SkillResponse(BaseModel):
    message: str
    skill: Skill


class SkillSummary(BaseModel):
    name: str
    type: Optional[SkillType] = None
    proficiency: int


class UserSkillMatch(BaseModel):
    id: str
    name: str
    bio: Optional[str] = None
    location: Optional[str] = None
    skills: list[SkillSummary]


class NearbyUser(UserSkillMatch):
    latitude: float
    longitude: float
    distance: float
