"""Authentication schemas"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserRegister(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    email: str | None = None
    user_id: int | None = None
    expires_at: datetime | None = None


class SessionUser(BaseModel):
    id: int
    email: str


class SessionResponse(BaseModel):
    """Mirror of the caller's session, as the web client keeps it"""
    user: SessionUser
    expires_at: Optional[datetime] = None
