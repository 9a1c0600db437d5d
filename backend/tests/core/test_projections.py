"""Tests for the Response Projector: pure record -> response mapping, no IO."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from statusboard.core.projections import (
    clean_tags, format_schedule_date, format_timestamp,
    project_admin, project_user, reaction_response, update_response,
    user_response,
)
from statusboard.core.records import (
    PopulatedProject, PopulatedReaction, PopulatedUpdate, ProjectRecord,
    UpdateRecord, UserRecord,
)


def _user(email="ann@example.com", first="Ann", last="Lee"):
    return UserRecord(
        id=uuid4(), email=email, first_name=first, last_name=last,
        password_hash="$pbkdf2-sha256$secret",
    )


ANN = _user()
BOB = _user("bob@example.com", "Bob", "Ray")
CAT = _user("cat@example.com", "Cat", "Ng")

WHEN = datetime(2022, 12, 14, 15, 4, tzinfo=timezone.utc)


def _populated_project():
    project = ProjectRecord(
        id=uuid4(), project_name="Apollo", creator_id=ANN.id,
        participant_ids=(ANN.id, BOB.id), invited_ids=(CAT.id,),
        tags=("Foo", " foo ", "BAR"),
        scheduled_updates=(WHEN,), created_at=WHEN,
    )
    return PopulatedProject(
        project=project, creator=ANN,
        participants=[ANN, BOB], invited_users=[CAT],
    )


# --- clean_tags ----------------------------------------------------------------

def test_clean_tags_lowercases_trims_and_dedupes_in_first_seen_order():
    assert clean_tags(["Foo", " foo ", "BAR"]) == ["foo", "bar"]


def test_clean_tags_drops_blank_tags():
    assert clean_tags(["  ", "", "ops"]) == ["ops"]


def test_clean_tags_empty_input():
    assert clean_tags([]) == []


# --- dates ---------------------------------------------------------------------

def test_schedule_date_ordinal_suffixes():
    days = (1, 2, 3, 4, 11, 12, 13, 21, 22, 23, 31)
    rendered = [format_schedule_date(datetime(2023, 1, d, tzinfo=timezone.utc)) for d in days]
    assert [r.split()[1] for r in rendered] == [
        "1st,", "2nd,", "3rd,", "4th,", "11th,", "12th,", "13th,",
        "21st,", "22nd,", "23rd,", "31st,",
    ]


def test_schedule_date_format():
    assert format_schedule_date(WHEN) == "December 14th, 2022"


def test_timestamp_format_uses_twelve_hour_clock():
    assert format_timestamp(WHEN) == "December 14th 2022, 3:04 pm"


def test_timestamp_midnight_and_noon():
    midnight = datetime(2023, 1, 1, 0, 5, tzinfo=timezone.utc)
    noon = datetime(2023, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert format_timestamp(midnight) == "January 1st 2023, 12:05 am"
    assert format_timestamp(noon) == "January 1st 2023, 12:00 pm"


def test_offset_datetime_is_rendered_in_utc():
    local = datetime(2022, 12, 14, 10, 4, tzinfo=timezone(timedelta(hours=-5)))
    assert format_timestamp(local) == "December 14th 2022, 3:04 pm"


def test_naive_datetime_is_read_as_utc():
    assert format_timestamp(WHEN.replace(tzinfo=None)) == format_timestamp(WHEN)


def test_timestamp_of_none_is_none():
    assert format_timestamp(None) is None


# --- users ---------------------------------------------------------------------

def test_user_response_never_contains_password_hash():
    response = user_response(ANN)
    assert response == {
        "id": str(ANN.id), "email": "ann@example.com",
        "first_name": "Ann", "last_name": "Lee",
    }
    assert "$pbkdf2" not in str(response)


# --- projects ------------------------------------------------------------------

def test_project_admin_flattens_references_to_emails():
    populated = _populated_project()
    response = project_admin(populated)
    assert response == {
        "id": str(populated.project.id),
        "project_name": "Apollo",
        "creator": "ann@example.com",
        "active": True,
        "participants": ["ann@example.com", "bob@example.com"],
        "invited_users": ["cat@example.com"],
        "scheduled_updates": ["December 14th, 2022"],
        "tags": ["foo", "bar"],
    }


def test_project_user_for_creator_includes_invitees_and_times():
    response = project_user(_populated_project(), ANN)
    assert response["role"] == "creator"
    assert response["invited_users"] == ["cat@example.com"]
    assert response["scheduled_updates"] == ["December 14th 2022, 3:04 pm"]
    assert response["date_created"] == "December 14th 2022, 3:04 pm"


def test_project_user_hides_invitees_from_non_creators():
    populated = _populated_project()
    assert project_user(populated, BOB)["role"] == "participant"
    assert "invited_users" not in project_user(populated, BOB)
    assert project_user(populated, CAT)["role"] == "invitee"
    assert project_user(populated, _user("eve@example.com"))["role"] == "none"


# --- updates -------------------------------------------------------------------

def test_update_response_shape():
    populated = _populated_project()
    update = UpdateRecord(
        id=uuid4(), project_id=populated.project.id, author_id=BOB.id,
        status="green", summary="Shipped", details="All done",
        created_at=WHEN, modified_at=WHEN,
    )
    response = update_response(PopulatedUpdate(update, BOB, populated.project))
    assert response == {
        "id": str(update.id),
        "author": "bob@example.com",
        "author_name": "Bob Ray",
        "project": str(populated.project.id),
        "project_name": "Apollo",
        "status": "green",
        "summary": "Shipped",
        "details": "All done",
        "todos": None,
        "blockers": None,
        "date_created": "December 14th 2022, 3:04 pm",
        "date_modified": "December 14th 2022, 3:04 pm",
    }


def test_reaction_response_uses_email_for_user():
    reaction_id, update_id = uuid4(), uuid4()
    response = reaction_response(PopulatedReaction(reaction_id, CAT, update_id))
    assert response == {
        "id": str(reaction_id), "user": "cat@example.com",
        "update_id": str(update_id),
    }
