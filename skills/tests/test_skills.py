"""
Unit Tests for the Skill Catalog

Tests cover:
1. Adding, listing and removing skills
2. Skill search by name and type
3. Haversine distances
4. Nearby search by location and skill
"""

import pytest
from uuid import uuid4

from core.errors import ConflictError, NotFoundError, ValidationError
from core.storage import InMemoryRepository
from core.users import UserDirectory
from skills.geo import haversine_km
from skills.models import AddSkillRequest, SkillType
from skills.service import SkillCatalog


# Test constants
ALICE_ID = "alice-1"
BOB_ID = "bob-1"
CARA_ID = "cara-1"
DAN_ID = "dan-1"

# Central London, Cambridge (~80 km away), Oxford (~83 km), Greenwich (~9 km)
LONDON = (51.5074, -0.1278)
CAMBRIDGE = (52.2053, 0.1218)
OXFORD = (51.7520, -1.2577)
GREENWICH = (51.4826, -0.0077)


def make_catalog():
    users = UserDirectory()
    users.add_user("Alice", user_id=ALICE_ID, bio="Guitar teacher")
    users.add_user("Bob", user_id=BOB_ID)
    users.add_user("Cara", user_id=CARA_ID)
    users.add_user("Dan", user_id=DAN_ID)
    return users, SkillCatalog(users)


def add(catalog, user_id, name, skill_type="offering", proficiency=None):
    return catalog.add_skill(
        user_id, AddSkillRequest(skill_name=name, type=skill_type, proficiency=proficiency)
    )


class TestAddSkill:
    """Tests for adding skills."""

    def test_add_skill_defaults(self):
        """Test that a new skill is stored with proficiency 3."""
        _, catalog = make_catalog()

        skill = add(catalog, ALICE_ID, "Guitar")

        assert skill.user_id == ALICE_ID
        assert skill.skill_name == "Guitar"
        assert skill.type == SkillType.OFFERING
        assert skill.proficiency == 3

    def test_duplicate_skill_rejected(self):
        """Test that the same name and type cannot be added twice."""
        _, catalog = make_catalog()
        add(catalog, ALICE_ID, "Guitar")

        with pytest.raises(ConflictError):
            add(catalog, ALICE_ID, "Guitar")

    def test_same_name_other_type_allowed(self):
        """Test that offering and seeking the same skill are distinct."""
        _, catalog = make_catalog()
        add(catalog, ALICE_ID, "Guitar", "offering")

        skill = add(catalog, ALICE_ID, "Guitar", "seeking")

        assert skill.type == SkillType.SEEKING

    @pytest.mark.parametrize("proficiency", [0, 6])
    def test_proficiency_out_of_range(self, proficiency):
        """Test that proficiency outside 1-5 raises ValidationError."""
        _, catalog = make_catalog()

        with pytest.raises(ValidationError):
            add(catalog, ALICE_ID, "Guitar", proficiency=proficiency)

    def test_blank_name_rejected(self):
        """Test that a whitespace-only name raises ValidationError."""
        _, catalog = make_catalog()

        with pytest.raises(ValidationError):
            add(catalog, ALICE_ID, "   ")

    def test_unknown_user(self):
        """Test that adding a skill for an unknown user raises NotFoundError."""
        _, catalog = make_catalog()

        with pytest.raises(NotFoundError):
            add(catalog, "ghost", "Guitar")

    def test_injected_empty_storage_is_used(self):
        """Test that an empty repository passed in receives the skill."""
        users, _ = make_catalog()
        repository = InMemoryRepository()
        catalog = SkillCatalog(users, storage=repository)

        skill = add(catalog, ALICE_ID, "Guitar")

        assert catalog.storage is repository
        assert repository.find_by_id(skill.id) == skill


class TestListAndRemove:
    """Tests for listing and deleting skills."""

    def test_list_splits_by_type(self):
        """Test that a user's skills are grouped into offering and seeking."""
        _, catalog = make_catalog()
        add(catalog, ALICE_ID, "Guitar", "offering")
        add(catalog, ALICE_ID, "Spanish", "seeking")
        add(catalog, BOB_ID, "Piano", "offering")

        listing = catalog.list_for_user(ALICE_ID)

        assert [s.skill_name for s in listing.offering] == ["Guitar"]
        assert [s.skill_name for s in listing.seeking] == ["Spanish"]
        assert catalog.count_for_user(ALICE_ID) == 2

    def test_remove_own_skill(self):
        """Test that a user can delete their own skill."""
        _, catalog = make_catalog()
        skill = add(catalog, ALICE_ID, "Guitar")

        catalog.remove_skill(ALICE_ID, str(skill.id))

        assert catalog.list_for_user(ALICE_ID).offering == []

    def test_cannot_remove_someone_elses_skill(self):
        """Test that another user's skill reads as not found and survives."""
        _, catalog = make_catalog()
        skill = add(catalog, ALICE_ID, "Guitar")

        with pytest.raises(NotFoundError):
            catalog.remove_skill(BOB_ID, skill.id)

        assert catalog.count_for_user(ALICE_ID) == 1

    @pytest.mark.parametrize("skill_id", [uuid4(), "not-a-uuid"])
    def test_remove_unknown_skill(self, skill_id):
        """Test that unknown skill ids raise NotFoundError."""
        _, catalog = make_catalog()

        with pytest.raises(NotFoundError):
            catalog.remove_skill(ALICE_ID, skill_id)


class TestSearch:
    """Tests for skill search."""

    def test_case_insensitive_substring_match(self):
        """Test that 'guit' finds users with 'Electric Guitar'."""
        _, catalog = make_catalog()
        add(catalog, ALICE_ID, "Electric Guitar", proficiency=5)
        add(catalog, ALICE_ID, "Cooking")
        add(catalog, BOB_ID, "Piano")

        results = catalog.search("GUIT")

        assert [r.id for r in results] == [ALICE_ID]
        assert results[0].bio == "Guitar teacher"
        assert [(s.name, s.type, s.proficiency) for s in results[0].skills] == [
            ("Electric Guitar", SkillType.OFFERING, 5)
        ]

    def test_filter_by_type(self):
        """Test that the type filter keeps only matching skill types."""
        _, catalog = make_catalog()
        add(catalog, ALICE_ID, "Guitar", "offering")
        add(catalog, BOB_ID, "Guitar", "seeking")

        assert [r.id for r in catalog.search("guitar", "seeking")] == [BOB_ID]

    def test_each_user_listed_once(self):
        """Test that several matching skills collapse into one user entry."""
        _, catalog = make_catalog()
        add(catalog, ALICE_ID, "Guitar", "offering")
        add(catalog, BOB_ID, "Bass Guitar", "offering")
        add(catalog, ALICE_ID, "Guitar", "seeking")

        results = catalog.search("guitar")

        assert [r.id for r in results] == [ALICE_ID, BOB_ID]
        assert len(results[0].skills) == 2

    def test_no_filters_lists_everyone_with_skills(self):
        """Test that an empty search returns every user holding a skill."""
        _, catalog = make_catalog()
        add(catalog, BOB_ID, "Piano")
        add(catalog, CARA_ID, "Chess", "seeking")

        assert [r.id for r in catalog.search()] == [BOB_ID, CARA_ID]

    def test_invalid_type(self):
        """Test that an unknown type raises ValidationError."""
        _, catalog = make_catalog()

        with pytest.raises(ValidationError):
            catalog.search("guitar", "teaching")


class TestHaversine:
    """Tests for great-circle distance."""

    def test_same_point_is_zero(self):
        assert haversine_km(*LONDON, *LONDON) == 0.0

    def test_london_to_cambridge(self):
        """Test a known distance to within a kilometre."""
        assert haversine_km(*LONDON, *CAMBRIDGE) == pytest.approx(79.7, abs=1.0)

    def test_symmetric(self):
        assert haversine_km(*LONDON, *OXFORD) == pytest.approx(haversine_km(*OXFORD, *LONDON))

    def test_quarter_meridian(self):
        """Test equator to pole along a meridian."""
        assert haversine_km(0, 0, 90, 0) == pytest.approx(10007.5, abs=0.1)


class TestNearby:
    """Tests for proximity search."""

    def _place_everyone(self, users):
        users.set_location(ALICE_ID, *LONDON, address="London")
        users.set_location(BOB_ID, *GREENWICH, address="Greenwich")
        users.set_location(CARA_ID, *CAMBRIDGE, address="Cambridge")
        users.set_location(DAN_ID, *OXFORD, address="Oxford")

    def test_nearby_within_default_radius(self):
        """Test that only users within 50 km are listed, closest first."""
        users, catalog = make_catalog()
        self._place_everyone(users)
        add(catalog, BOB_ID, "Piano", proficiency=4)
        add(catalog, BOB_ID, "Spanish", "seeking")

        results = catalog.nearby(ALICE_ID)

        assert [r.id for r in results] == [BOB_ID]
        assert results[0].location == "Greenwich"
        assert results[0].distance == round(haversine_km(*LONDON, *GREENWICH), 1)
        assert [(s.name, s.proficiency) for s in results[0].skills] == [("Piano", 4)]

    def test_larger_radius_sorted_by_distance(self):
        """Test that widening the radius adds farther users in distance order."""
        users, catalog = make_catalog()
        self._place_everyone(users)

        results = catalog.nearby(ALICE_ID, radius=100)

        assert [r.id for r in results] == [BOB_ID, CARA_ID, DAN_ID]
        assert [r.distance for r in results] == sorted(r.distance for r in results)

    def test_skill_filter_uses_offered_skills(self):
        """Test that only users offering a matching skill qualify."""
        users, catalog = make_catalog()
        self._place_everyone(users)
        add(catalog, BOB_ID, "Guitar", "seeking")
        add(catalog, CARA_ID, "Jazz Guitar", "offering")

        results = catalog.nearby(ALICE_ID, skill="guitar", radius=100)

        assert [r.id for r in results] == [CARA_ID]

    def test_explicit_origin_overrides_stored_location(self):
        """Test that query coordinates are used as the origin."""
        users, catalog = make_catalog()
        self._place_everyone(users)

        results = catalog.nearby(ALICE_ID, radius=10, latitude=CAMBRIDGE[0], longitude=CAMBRIDGE[1])

        assert [r.id for r in results] == [CARA_ID]
        assert results[0].distance == 0.0

    def test_users_without_location_are_skipped(self):
        """Test that users with no coordinates never appear."""
        users, catalog = make_catalog()
        users.set_location(ALICE_ID, *LONDON)

        assert catalog.nearby(ALICE_ID, radius=20000) == []

    def test_origin_required(self):
        """Test that a caller without a location or query coordinates is rejected."""
        _, catalog = make_catalog()

        with pytest.raises(ValidationError, match="Location not set"):
            catalog.nearby(ALICE_ID)

    def test_equator_and_meridian_origin_is_valid(self):
        """Test that coordinates of zero are a real location."""
        users, catalog = make_catalog()
        users.set_location(ALICE_ID, 0.0, 0.0)
        users.set_location(BOB_ID, 0.1, 0.1)

        assert [r.id for r in catalog.nearby(ALICE_ID)] == [BOB_ID]

    def test_negative_radius(self):
        """Test that a negative radius raises ValidationError."""
        users, catalog = make_catalog()
        users.set_location(ALICE_ID, *LONDON)

        with pytest.raises(ValidationError):
            catalog.nearby(ALICE_ID, radius=-1)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
