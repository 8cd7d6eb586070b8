import threading
from typing import Optional, Union
from uuid import UUID, uuid4

from core.clock import Clock, utc_now
from core.errors import ConflictError, NotFoundError, ValidationError
from core.storage import InMemoryRepository, Repository
from core.users import User, UserDirectory

from .geo import haversine_km
from .models import (
    DEFAULT_PROFICIENCY,
    MAX_PROFICIENCY,
    MIN_PROFICIENCY,
    AddSkillRequest,
    NearbyUser,
    Skill,
    SkillListing,
    SkillSummary,
    SkillType,
    UserSkillMatch,
)

DEFAULT_RADIUS_KM = 50.0


class SkillCatalog:
    """Skills each user offers or seeks, and the searches built on them.

    A user holds at most one skill per ``(skill_name, type)`` pair.
    """

    def __init__(
        self,
        users: UserDirectory,
        storage: Optional[Repository[Skill]] = None,
        clock: Clock = utc_now,
    ):
        self.users = users
        self.storage = storage if storage is not None else InMemoryRepository()
        self.clock = clock
        self._lock = threading.Lock()

    def add_skill(self, user_id: str, request: AddSkillRequest) -> Skill:
        self.users.find_user(user_id)
        name = request.skill_name.strip()
        if not name:
            raise ValidationError("Skill name and type are required")
        skill_type = self._parse_type(request.type)
        proficiency = DEFAULT_PROFICIENCY if request.proficiency is None else request.proficiency
        if isinstance(proficiency, bool) or not MIN_PROFICIENCY <= proficiency <= MAX_PROFICIENCY:
            raise ValidationError(
                f"Proficiency must be between {MIN_PROFICIENCY} and {MAX_PROFICIENCY}"
            )

        with self._lock:
            duplicate = self.storage.find_by_predicate(
                lambda s: s.user_id == user_id and s.skill_name == name and s.type == skill_type
            )
            if duplicate:
                raise ConflictError("Skill already added")

            skill = Skill(
                id=uuid4(),
                user_id=user_id,
                skill_name=name,
                type=skill_type,
                proficiency=proficiency,
                created_at=self.clock(),
            )
            return self.storage.insert(skill)

    def list_for_user(self, user_id: str) -> SkillListing:
        skills = self.storage.find_by_predicate(lambda s: s.user_id == user_id)
        return SkillListing(
            offering=[s for s in skills if s.type == SkillType.OFFERING],
            seeking=[s for s in skills if s.type == SkillType.SEEKING],
        )

    def remove_skill(self, user_id: str, skill_id: Union[UUID, str]) -> None:
        """Delete one of the caller's own skills; anyone else's reads as missing."""
        with self._lock:
            skill = self.storage.find_by_id(self._coerce_id(skill_id))
            if not skill or skill.user_id != user_id:
                raise NotFoundError("Skill not found")
            self.storage.delete(skill.id)

    def count_for_user(self, user_id: str) -> int:
        return len(self.storage.find_by_predicate(lambda s: s.user_id == user_id))

    def search(
        self, skill: Optional[str] = None, skill_type: Optional[Union[SkillType, str]] = None
    ) -> list[UserSkillMatch]:
        """Users holding a skill whose name contains ``skill``, case-insensitively.

        Each user appears once, in the order their first matching skill was
        added, carrying only the skills that matched.
        """
        needle = skill.lower() if skill else None
        wanted = self._parse_type(skill_type) if skill_type else None
        matches = self.storage.find_by_predicate(
            lambda s: (needle is None or needle in s.skill_name.lower())
            and (wanted is None or s.type == wanted)
        )

        grouped: dict[str, list[Skill]] = {}
        for match in matches:
            grouped.setdefault(match.user_id, []).append(match)

        results = []
        for user_id, skills in grouped.items():
            user = self.users.get(user_id)
            if not user:
                continue
            results.append(UserSkillMatch(
                id=user.id,
                name=user.name,
                bio=user.bio,
                location=user.location,
                skills=[
                    SkillSummary(name=s.skill_name, type=s.type, proficiency=s.proficiency)
                    for s in skills
                ],
            ))
        return results

    def nearby(
        self,
        user_id: str,
        skill: Optional[str] = None,
        radius: float = DEFAULT_RADIUS_KM,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> list[NearbyUser]:
        """Users within ``radius`` km of an origin, closest first.

        The origin is the given coordinates, or the caller's stored location
        when either is missing. With ``skill`` only users offering a matching
        skill qualify; the caller is never listed.
        """
        caller = self.users.find_user(user_id)
        if latitude is None or longitude is None:
            latitude, longitude = caller.latitude, caller.longitude
        if latitude is None or longitude is None:
            raise ValidationError("Location not set. Please update your location.")
        if radius < 0:
            raise ValidationError("Radius must not be negative")

        if skill:
            offered = self.storage.find_by_predicate(
                lambda s: s.type == SkillType.OFFERING and skill.lower() in s.skill_name.lower()
            )
            candidate_ids = list(dict.fromkeys(s.user_id for s in offered))
            candidates = [u for u in map(self.users.get, candidate_ids) if u]
        else:
            candidates = self.users.list_users()

        results = []
        for user in candidates:
            if user.id == caller.id or user.latitude is None or user.longitude is None:
                continue
            distance = round(haversine_km(latitude, longitude, user.latitude, user.longitude), 1)
            if distance <= radius:
                results.append(self._nearby_view(user, distance))
        results.sort(key=lambda u: u.distance)
        return results

    def _nearby_view(self, user: User, distance: float) -> NearbyUser:
        offered = self.storage.find_by_predicate(
            lambda s: s.user_id == user.id and s.type == SkillType.OFFERING
        )
        return NearbyUser(
            id=user.id,
            name=user.name,
            bio=user.bio,
            location=user.location,
            latitude=user.latitude,
            longitude=user.longitude,
            distance=distance,
            skills=[SkillSummary(name=s.skill_name, proficiency=s.proficiency) for s in offered],
        )

    @staticmethod
    def _parse_type(value: Union[SkillType, str]) -> SkillType:
        try:
            return SkillType(value)
        except ValueError:
            raise ValidationError('Type must be "offering" or "seeking"')

    @staticmethod
    def _coerce_id(skill_id: Union[UUID, str]) -> Optional[UUID]:
        if isinstance(skill_id, UUID):
            return skill_id
        try:
            return UUID(str(skill_id))
        except ValueError:
            return None
