from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator


class RoleOut(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)


class UserBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    country_id: int | None = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("The name field is required.")
        return value

    @field_validator("email")
    @classmethod
    def _email_length(cls, value: str) -> str:
        if len(value) > 255:
            raise ValueError("The email may not be greater than 255 characters.")
        return value.lower()


class UserCreate(UserBase):
    password: str = Field(min_length=8)
    password_confirmation: str
    roles: List[int] = Field(min_length=1)

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.password != self.password_confirmation:
            raise ValueError("The password confirmation does not match.")
        return self


class UserUpdate(UserBase):
    # Empty password keeps the current one
    password: str | None = None
    password_confirmation: str | None = None
    roles: List[int] = Field(min_length=1)

    @field_validator("password", "password_confirmation", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value:
            return None
        return value

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.password is None:
            return self
        if len(self.password) < 8:
            raise ValueError("The password must be at least 8 characters.")
        if self.password != self.password_confirmation:
            raise ValueError("The password confirmation does not match.")
        return self


class User(BaseModel):
    id: int
    name: str
    email: str
    email_verified_at: datetime | None = None
    country_id: int | None = None
    roles: List[RoleOut] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)
