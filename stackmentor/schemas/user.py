from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from stackmentor.models.user import RoleType

class RegisterRequest(BaseModel):
    name: str = Field(min_length=1)  # "Nombre Apellido"
    email: EmailStr
    password: str = Field(min_length=8)
    date_of_birth: date
    role: RoleType
    years_of_experience: Optional[int] = Field(default=None, ge=0)
    industry: Optional[str] = None
    skills_or_interests: List[str] = []
    city: str = Field(min_length=1)
    state: str = Field(min_length=2, max_length=2)
    gender: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("date_of_birth")
    @classmethod
    def must_be_past(cls, value: date) -> date:
        if value >= date.today():
            raise ValueError("Date of birth must be in the past")
        return value

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"

class UserPublic(BaseModel):
    id: int
    email: EmailStr
    first_name: str
    last_name: str
    role: RoleType
    city: Optional[str] = None
    state: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[int] = None
    bio: Optional[str] = None
    profile_picture_url: Optional[str] = None
    job_title: Optional[str] = None
    years_of_experience: Optional[int] = None
    industry: Optional[str] = None
    skills: List[str] = []
    interests: List[str] = []
    position: str
    is_verified: bool
    created_at: datetime

    class Config:
        from_attributes = True
