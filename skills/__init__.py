"""Skill catalog: what users offer and seek, plus skill and proximity search."""

from .models import NearbyUser, Skill, SkillListing, SkillType, UserSkillMatch
from .service import SkillCatalog

__all__ = [
    "NearbyUser",
    "Skill",
    "SkillListing",
    "SkillType",
    "UserSkillMatch",
    "SkillCatalog",
]
