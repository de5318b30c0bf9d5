from enum import Enum
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: Optional[Role] = None


class UserSignIn(BaseModel):
    # normalized the same way as at signup so the lookup matches the stored email
    email: EmailStr
    password: str


class Identity(BaseModel):
    """Caller identity decoded from the bearer token."""

    id: str
    username: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
