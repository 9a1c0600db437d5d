"""Project ORM: a team's shared status stream and its membership rows.

Invariants:
    - creator_id is set once at creation and never edited
    - (project_id, user_id) is the primary key of project_members, so a user is
      a participant OR an invitee of a project, never both
    - position orders members within a role for stable responses

Design Decisions:
    - Tags and scheduled update dates stored as JSON arrays (ISO strings for dates)
    - Membership in its own table so "projects containing user X" is an indexed query
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    String, Boolean, Integer, DateTime, JSON, ForeignKey, Index,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from statusboard.db.base import Base

ROLE_PARTICIPANT = "participant"
ROLE_INVITEE = "invitee"


class Project(Base):
    """Project entity."""
    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    project_name: Mapped[str] = mapped_column(String(200), nullable=False)
    creator_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    scheduled_updates: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class ProjectMember(Base):
    """A participant or invitee row of a project."""
    __tablename__ = "project_members"
    __table_args__ = (
        Index("ix_project_members_user_id", "user_id"),
    )

    project_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id"), primary_key=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), primary_key=True,
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
