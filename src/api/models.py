"""Pydantic models for API request/response.

Request models are deliberately permissive: every field accepts any JSON
value and field rules are enforced by services.user_validation, so that
every violation is reported together.
"""

from datetime import date, datetime
from typing import Any, Optional
from pydantic import BaseModel, Field

from domain.model.user import UserCreate, UserUpdate, UserView


def _parse_date(value: Any) -> Any:
    """ISO ``YYYY-MM-DD`` strings become dates. Anything else is passed through for the rules to reject."""
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return value
    return value


class UserCreateRequest(BaseModel):
    """Request model for user registration."""
    name: Any = None
    email: Any = None
    password: Any = None
    birth_date: Any = Field(None, description="ISO date, YYYY-MM-DD")
    phone: Any = None

    def to_domain(self) -> UserCreate:
        return UserCreate(
            name=self.name,
            email=self.email,
            password=self.password,
            birth_date=_parse_date(self.birth_date),
            phone=self.phone,
        )


class UserUpdateRequest(BaseModel):
    """Request model for user update."""
    name: Any = None
    email: Any = None
    birth_date: Any = Field(None, description="ISO date, YYYY-MM-DD")
    phone: Any = None
    active: Any = Field(None, description="False deactivates the user; omit to keep the current state")

    def to_domain(self) -> UserUpdate:
        return UserUpdate(
            name=self.name,
            email=self.email,
            birth_date=_parse_date(self.birth_date),
            phone=self.phone,
            active=self.active,
        )


class UserResponse(BaseModel):
    """Response model for user (never includes the password)."""
    id: int = Field(..., description="User ID")
    name: str
    email: str
    birth_date: date
    phone: Optional[str] = None
    active: bool
    created_at: datetime

    @classmethod
    def from_view(cls, view: UserView) -> "UserResponse":
        return cls(
            id=view.id,
            name=view.name,
            email=view.email,
            birth_date=view.birth_date,
            phone=view.phone,
            active=view.active,
            created_at=view.created_at,
        )


class EmailExistsResponse(BaseModel):
    """Response model for email availability check."""
    exists: bool
