"""Response Projector: maps populated records to externally-safe response dicts.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - The only identifier of a record in its own response is str(primary key);
      foreign references become display values (emails, names)
    - Passwords and hashes never appear in any response
    - Two date renderings: SCHEDULE_DATE_FORMAT for scheduled update dates in
      admin summaries, TIMESTAMP_FORMAT wherever a time of day is shown
    - All dates rendered in UTC; naive datetimes are read as UTC

Design Decisions:
    - Formats are moment-style patterns rendered by arrow in its English locale,
      so output does not depend on the process locale
"""

from collections.abc import Iterable
from datetime import datetime

import arrow

from statusboard.core.domain_types import MembershipRole, UserId
from statusboard.core.records import (
    PopulatedProject, PopulatedReaction, PopulatedUpdate, UserRecord,
)

SCHEDULE_DATE_FORMAT = "MMMM Do, YYYY"       # December 14th, 2022
TIMESTAMP_FORMAT = "MMMM Do YYYY, h:mm a"    # December 14th 2022, 3:04 pm


# --- Tags ----------------------------------------------------------------------

def clean_tags(tags: Iterable[str]) -> list[str]:
    """Lowercase, trim and dedupe tags, keeping order of first occurrence."""
    cleaned: list[str] = []
    seen: set[str] = set()
    for tag in tags:
        normalized = tag.strip().lower()
        if normalized and normalized not in seen:
            seen.add(normalized)
            cleaned.append(normalized)
    return cleaned


# --- Dates ---------------------------------------------------------------------

def format_moment(value: datetime, pattern: str) -> str:
    """Render in UTC; naive datetimes are taken to be UTC already."""
    return arrow.get(value).to("utc").format(pattern, locale="en_us")


def format_schedule_date(value: datetime) -> str:
    return format_moment(value, SCHEDULE_DATE_FORMAT)


def format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return format_moment(value, TIMESTAMP_FORMAT)


# --- Users ---------------------------------------------------------------------

def user_response(user: UserRecord) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
    }


# --- Projects ------------------------------------------------------------------

def project_admin(populated: PopulatedProject) -> dict:
    """Full project summary with references flattened to emails."""
    project = populated.project
    return {
        "id": str(project.id),
        "project_name": project.project_name,
        "creator": populated.creator.email,
        "active": project.active,
        "participants": [u.email for u in populated.participants],
        "invited_users": [u.email for u in populated.invited_users],
        "scheduled_updates": [
            format_schedule_date(d) for d in project.scheduled_updates
        ],
        "tags": clean_tags(project.tags),
    }


def project_user(populated: PopulatedProject, viewer: UserRecord) -> dict:
    """Project summary as seen by one user.

    Carries the viewer's role relative to the creator and renders every date
    with its time of day. Invitees are listed only for the creator.
    """
    project = populated.project
    role = membership_role(populated, viewer.id)
    response = {
        "id": str(project.id),
        "project_name": project.project_name,
        "creator": populated.creator.email,
        "role": role.value,
        "active": project.active,
        "participants": [u.email for u in populated.participants],
        "scheduled_updates": [
            format_timestamp(d) for d in project.scheduled_updates
        ],
        "tags": clean_tags(project.tags),
        "date_created": format_timestamp(project.created_at),
    }
    if role is MembershipRole.CREATOR:
        response["invited_users"] = [u.email for u in populated.invited_users]
    return response


def membership_role(populated: PopulatedProject, user_id: UserId) -> MembershipRole:
    project = populated.project
    if project.creator_id == user_id:
        return MembershipRole.CREATOR
    if project.has_participant(user_id):
        return MembershipRole.PARTICIPANT
    if project.has_invitee(user_id):
        return MembershipRole.INVITEE
    return MembershipRole.NONE


# --- Updates -------------------------------------------------------------------

def update_response(populated: PopulatedUpdate) -> dict:
    update = populated.update
    return {
        "id": str(update.id),
        "author": populated.author.email,
        "author_name": populated.author.full_name,
        "project": str(populated.project.id),
        "project_name": populated.project.project_name,
        "status": update.status,
        "summary": update.summary,
        "details": update.details,
        "todos": update.todos,
        "blockers": update.blockers,
        "date_created": format_timestamp(update.created_at),
        "date_modified": format_timestamp(update.modified_at),
    }


# --- Reactions -----------------------------------------------------------------

def reaction_response(populated: PopulatedReaction) -> dict:
    """Shared shape of Thanks and EyesWanted responses."""
    return {
        "id": str(populated.id),
        "user": populated.user.email,
        "update_id": str(populated.update_id),
    }


thanks_response = reaction_response
eyes_wanted_response = reaction_response
