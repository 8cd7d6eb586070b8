"""Users API - directory access, skill and proximity search, reputation."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from core.errors import SkilLinkError
from core.users import CreateUserRequest, UpdateLocationRequest, User
from reviews.models import Reputation
from skills.models import NearbyUser, SkillType, UserSkillMatch
from skills.service import DEFAULT_RADIUS_KM

from api.deps import Services, get_current_user, get_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
def create_user(request: CreateUserRequest, services: Services = Depends(get_services)) -> User:
    try:
        user = services.users.add_user(request.name, request.email, bio=request.bio)
    except SkilLinkError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    logger.info("Registered user %s", user.id)
    return user


# Fixed paths are declared before /{user_id} so they are not read as ids.
@router.get("/search", response_model=list[UserSkillMatch])
def search_users(
    skill: Optional[str] = None,
    skill_type: Optional[SkillType] = Query(default=None, alias="type"),
    services: Services = Depends(get_services),
) -> list[UserSkillMatch]:
    return services.skills.search(skill, skill_type)


@router.get("/nearby", response_model=list[NearbyUser])
def nearby_users(
    skill: Optional[str] = None,
    radius: float = DEFAULT_RADIUS_KM,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> list[NearbyUser]:
    try:
        return services.skills.nearby(user.id, skill, radius, latitude, longitude)
    except SkilLinkError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.put("/location")
def update_location(
    request: UpdateLocationRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    try:
        updated = services.users.set_location(
            user.id, request.latitude, request.longitude, request.address
        )
    except SkilLinkError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    logger.info("Location updated for %s", user.id)
    return {
        "message": "Location updated successfully",
        "location": {
            "latitude": updated.latitude,
            "longitude": updated.longitude,
            "address": updated.location,
        },
    }


@router.get("/{user_id}", response_model=User)
def get_user(user_id: str, services: Services = Depends(get_services)) -> User:
    try:
        return services.users.find_user(user_id)
    except SkilLinkError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{user_id}/reputation", response_model=Reputation)
def get_reputation(user_id: str, services: Services = Depends(get_services)) -> Reputation:
    try:
        return services.reviews.reputation(user_id)
    except SkilLinkError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
