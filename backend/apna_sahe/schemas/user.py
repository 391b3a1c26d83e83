"""
Apna SAHE Backend — User & Auth Schemas
=========================================

What:  User profile documents, sign-up / sign-in payloads and results,
       profile updates, and leaderboard entries.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field, field_validator

from apna_sahe.schemas.common import CamelModel

Role = Literal["student", "admin"]


class UserResponse(CamelModel):
    """A `users/{uid}` document."""
    id: Optional[str] = None
    uid: str
    name: str
    email: str
    role: Role
    branch: str
    semester: str
    points: int = 0
    notes_uploaded: int = 0
    created_at: Optional[datetime] = None


class LeaderboardEntry(UserResponse):
    """A student on the leaderboard, ranked from 1 by points."""
    rank: int


class SignUpRequest(CamelModel):
    email: EmailStr
    # Firebase Auth rejects passwords shorter than six characters
    password: str = Field(min_length=6, max_length=128)
    name: str = Field(min_length=1, max_length=120)
    branch: str = Field(min_length=1, max_length=20)
    semester: str = Field(min_length=1, max_length=10)


class AdminCreateRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    name: str = Field(min_length=1, max_length=120)


class SignInRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class SignUpResponse(CamelModel):
    """Result of registering a student or creating an admin."""
    uid: str
    user_data: UserResponse


class SignInResponse(CamelModel):
    """
    Result of a password sign-in.

    The ID token is what the client sends back as `Authorization: Bearer`.
    """
    uid: str
    id_token: str
    refresh_token: str
    expires_in: int
    user_data: UserResponse


class ProfileUpdate(CamelModel):
    """Fields a user may change on their own profile."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    branch: Optional[str] = Field(default=None, min_length=1, max_length=20)
    semester: Optional[str] = Field(default=None, min_length=1, max_length=10)

    @field_validator("branch")
    @classmethod
    def upper_branch(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v


class UserUpdate(ProfileUpdate):
    """Admin update: profile fields plus role and points."""
    role: Optional[Role] = None
    points: Optional[int] = Field(default=None, ge=0)
    notes_uploaded: Optional[int] = Field(default=None, ge=0)


class PointsAward(CamelModel):
    points: int = Field(default=10, ge=1, le=1000)
