from datetime import date

import pytest

from app.domain.errors import Conflict
from app.domain.models import ProfileCriteria

from .conftest import build_user


def test_insert_assigns_record_key_and_timestamps(persistence):
    saved = persistence.insert_user(build_user(1, email="Mixed@Example.com"))

    assert len(saved.id) == 24
    assert saved.email == "mixed@example.com"
    assert saved.created_at is not None
    assert persistence.get_user(saved.id).email == "mixed@example.com"


def test_profile_document_round_trips(persistence):
    saved = persistence.insert_user(
        build_user(
            1,
            height_cm=172,
            diet="Vegan",
            photos=["/uploads/profile-pictures/a.png"],
            partner_preferences={"ageRange": {"min": 25, "max": 32}},
        )
    )
    loaded = persistence.get_user(saved.id)

    assert loaded.height_cm == 172
    assert loaded.diet == "Vegan"
    assert loaded.photos == ["/uploads/profile-pictures/a.png"]
    assert loaded.partner_preferences == {"ageRange": {"min": 25, "max": 32}}
    assert loaded.date_of_birth == date(1995, 1, 1)


def test_duplicate_email_is_a_conflict(persistence):
    persistence.insert_user(build_user(1))
    with pytest.raises(Conflict) as excinfo:
        persistence.insert_user(build_user(2, email="USER1@example.com"))
    assert "email" in excinfo.value.errors


def test_duplicate_mobile_number_is_a_conflict(persistence):
    persistence.insert_user(build_user(1))
    with pytest.raises(Conflict) as excinfo:
        persistence.insert_user(build_user(2, mobile_number=build_user(1).mobile_number))
    assert "mobileNumber" in excinfo.value.errors


def test_update_merges_columns_and_document(persistence):
    saved = persistence.insert_user(build_user(1))
    updated = persistence.update_user(saved.id, {"city": "Mumbai", "occupation": "Architect"})

    assert updated.city == "Mumbai"
    assert updated.occupation == "Architect"
    assert updated.name == saved.name
    assert persistence.update_user("f" * 24, {"city": "Goa"}) is None


def test_update_cannot_steal_another_email(persistence):
    persistence.insert_user(build_user(1))
    second = persistence.insert_user(build_user(2))
    with pytest.raises(Conflict):
        persistence.update_user(second.id, {"email": "user1@example.com"})


def test_delete_returns_removed_record(persistence):
    saved = persistence.insert_user(build_user(1))
    assert persistence.delete_user(saved.id).id == saved.id
    assert persistence.get_user(saved.id) is None
    assert persistence.delete_user(saved.id) is None


def test_scan_is_newest_first_with_skip_and_limit(persistence):
    ids = [persistence.insert_user(build_user(index)).id for index in range(5)]

    page = persistence.find_users(ProfileCriteria(skip=1, limit=2))

    assert [user.id for user in page] == [ids[3], ids[2]]
    assert persistence.count_users(ProfileCriteria(skip=1, limit=2)) == 5


def test_text_filters_are_case_insensitive_substrings(persistence):
    persistence.insert_user(build_user(1, city="Navi Mumbai", religion="Hindu"))
    persistence.insert_user(build_user(2, city="Chennai", state="Tamil Nadu", religion="Christian"))
    persistence.insert_user(build_user(3, city="Delhi", state="Delhi", country="India", religion=None))

    assert {u.city for u in persistence.find_users(ProfileCriteria(location="MUMBAI"))} == {"Navi Mumbai"}
    assert {u.city for u in persistence.find_users(ProfileCriteria(location="tamil"))} == {"Chennai"}
    assert len(persistence.find_users(ProfileCriteria(location="indi"))) == 3
    assert {u.religion for u in persistence.find_users(ProfileCriteria(religion="christ"))} == {"Christian"}


def test_like_wildcards_are_matched_literally(persistence):
    persistence.insert_user(build_user(1, city="Pune"))
    assert persistence.find_users(ProfileCriteria(location="%")) == []
    assert persistence.find_users(ProfileCriteria(location="_")) == []


def test_birth_date_bounds_and_exclusion(persistence):
    older = persistence.insert_user(build_user(1, date_of_birth=date(1980, 5, 1)))
    younger = persistence.insert_user(build_user(2, date_of_birth=date(2000, 5, 1)))

    criteria = ProfileCriteria(born_on_or_after=date(1990, 1, 1))
    assert [u.id for u in persistence.find_users(criteria)] == [younger.id]

    criteria = ProfileCriteria(born_on_or_before=date(1990, 1, 1), exclude_id=older.id)
    assert persistence.find_users(criteria) == []
