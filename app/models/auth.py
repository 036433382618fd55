"""Pydantic models for authentication."""
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import List, Optional


VALID_INTERESTS = [
    "History", "Adventure", "Culture", "Relaxation", "Nature", "Sport", "Wildlife",
    "Beach", "Mountains", "Food & Wine", "Art", "Photography", "Festivals",
    "Local Experience", "Eco Tourism",
]


class LoginRequest(BaseModel):
    """Login request model."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """Registration request model."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=2, description="Name must be at least 2 characters")
    email: EmailStr
    password: str = Field(..., min_length=6, description="Password must be at least 6 characters")
    date_of_birth: str = Field(..., alias="dateOfBirth")


class InterestsRequest(BaseModel):
    """Interests update model."""
    interests: List[str]


class AuthResponse(BaseModel):
    """Authentication response model."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    email: str
    token: str


class UserResponse(BaseModel):
    """User response model."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    email: str
    date_of_birth: Optional[str] = Field(None, alias="dateOfBirth")
    interests: List[str] = []
    created_at: Optional[str] = Field(None, alias="createdAt")
