"""User Schemas: sign-up, sign-in and profile edits."""

from pydantic import BaseModel, EmailStr, Field, field_validator

from statusboard.core.domain_types import NAME_MAX_LENGTH


class SignUpRequest(BaseModel):
    first_name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    last_name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    email: EmailStr
    password: str = Field(min_length=8, max_length=256)

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=256)


class ProfileEdit(BaseModel):
    """Partial profile change; omitted fields are left untouched."""
    first_name: str | None = Field(None, min_length=1, max_length=NAME_MAX_LENGTH)
    last_name: str | None = Field(None, min_length=1, max_length=NAME_MAX_LENGTH)
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=8, max_length=256)
