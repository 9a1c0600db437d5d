"""Update Schemas: posting and editing status updates.

Invariants:
    - summary is at most SUMMARY_MAX_LENGTH characters; a longer summary is
      answered with 413 by the validation error handler
    - status, summary and details are required on creation
"""

from uuid import UUID

from pydantic import BaseModel, Field

from statusboard.core.domain_types import SUMMARY_MAX_LENGTH

STATUS_MAX_LENGTH = 100
BODY_MAX_LENGTH = 10_000


class UpdateCreate(BaseModel):
    status: str = Field(min_length=1, max_length=STATUS_MAX_LENGTH)
    summary: str = Field(min_length=1, max_length=SUMMARY_MAX_LENGTH)
    details: str = Field(min_length=1, max_length=BODY_MAX_LENGTH)
    todos: str | None = Field(None, max_length=BODY_MAX_LENGTH)
    blockers: str | None = Field(None, max_length=BODY_MAX_LENGTH)


class UpdateEdit(BaseModel):
    status: str | None = Field(None, min_length=1, max_length=STATUS_MAX_LENGTH)
    summary: str | None = Field(None, min_length=1, max_length=SUMMARY_MAX_LENGTH)
    details: str | None = Field(None, min_length=1, max_length=BODY_MAX_LENGTH)
    todos: str | None = Field(None, max_length=BODY_MAX_LENGTH)
    blockers: str | None = Field(None, max_length=BODY_MAX_LENGTH)


class EyesRequest(BaseModel):
    """Ask another participant to look at an update."""
    user_id: UUID
