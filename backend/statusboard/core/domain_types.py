"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, ProjectId, UpdateId, ThanksId, EyesWantedId wrap UUIDs
    - All valid states encoded as Enums, no raw string matching
    - Date format constants are moment-style patterns rendered by core/projections.py
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
ProjectId = NewType("ProjectId", UUID)
UpdateId = NewType("UpdateId", UUID)
ThanksId = NewType("ThanksId", UUID)
EyesWantedId = NewType("EyesWantedId", UUID)


# ─── Limits ──────────────────────────────────────────────────────

SUMMARY_MAX_LENGTH = 60
NAME_MAX_LENGTH = 100
PROJECT_NAME_MAX_LENGTH = 200


# ─── Enums ───────────────────────────────────────────────────────

class MembershipRole(str, Enum):
    """How a user relates to a project, from that user's point of view."""
    CREATOR = "creator"
    PARTICIPANT = "participant"
    INVITEE = "invitee"
    NONE = "none"


class InviteResponse(str, Enum):
    """Answer to a project invitation."""
    ACCEPT = "accept"
    DECLINE = "decline"


class CascadeStep(str, Enum):
    """Named steps of a deletion cascade, in execution order."""
    RESOLVE = "resolve"
    DELETE_UPDATE_REACTIONS = "delete_update_reactions"
    DELETE_UPDATES = "delete_updates"
    DELETE_USER_REACTIONS = "delete_user_reactions"
    DELETE_PROJECTS = "delete_projects"
    REMOVE_MEMBERSHIPS = "remove_memberships"
    DELETE_USER = "delete_user"
    INVALIDATE_SESSIONS = "invalidate_sessions"
