"""Project Schemas: creation, edits and invitations.

Invariants:
    - project_name: 1-200 chars, stripped, non-empty
    - Tags are cleaned by the service, not here; the schema only bounds them
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from statusboard.core.domain_types import InviteResponse, PROJECT_NAME_MAX_LENGTH


class ProjectCreate(BaseModel):
    project_name: str = Field(min_length=1, max_length=PROJECT_NAME_MAX_LENGTH)
    invited_users: list[EmailStr] = Field(default_factory=list, max_length=100)
    tags: list[str] = Field(default_factory=list, max_length=50)
    scheduled_updates: list[datetime] = Field(default_factory=list)

    @field_validator("project_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("project_name cannot be empty or whitespace")
        return v


class ProjectEdit(BaseModel):
    project_name: str | None = Field(
        None, min_length=1, max_length=PROJECT_NAME_MAX_LENGTH,
    )
    active: bool | None = None
    tags: list[str] | None = Field(None, max_length=50)
    scheduled_updates: list[datetime] | None = None


class InviteRequest(BaseModel):
    email: EmailStr


class InviteAnswer(BaseModel):
    response: InviteResponse
