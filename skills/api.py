import logging

from fastapi import APIRouter, Depends, HTTPException, status

from api.deps import Services, get_current_user, get_services
from core.errors import SkilLinkError
from core.users import User

from .models import AddSkillRequest, SkillListing, SkillResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/skills", tags=["Skills"])


@router.post("", response_model=SkillResponse, status_code=status.HTTP_201_CREATED)
def add_skill(
    request: AddSkillRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> SkillResponse:
    try:
        skill = services.skills.add_skill(user.id, request)
    except SkilLinkError as e:
        logger.warning("Skill %r for %s rejected: %s", request.skill_name, user.id, e)
        raise HTTPException(status_code=e.status_code, detail=str(e))

    logger.info("Skill %s added for %s", skill.id, user.id)
    return SkillResponse(message="Skill added successfully", skill=skill)


@router.get("", response_model=SkillListing)
def list_skills(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> SkillListing:
    return services.skills.list_for_user(user.id)


@router.delete("/{skill_id}")
def remove_skill(
    skill_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    try:
        services.skills.remove_skill(user.id, skill_id)
    except SkilLinkError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    logger.info("Skill %s removed by %s", skill_id, user.id)
    return {"message": "Skill removed successfully"}
