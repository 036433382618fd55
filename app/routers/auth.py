"""Authentication routes.

Users register with email and password; both register and login hand back a
bearer JWT that the other routers check through `get_current_user`.
"""
import logging

from fastapi import APIRouter, HTTPException, status, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import (
    create_access_token,
    get_current_user,
    hash_password,
    verify_password,
)
from app.models.auth import (
    VALID_INTERESTS,
    AuthResponse,
    InterestsRequest,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from app.models.orm import User
from app.services import user_store

router = APIRouter(prefix="/auth", tags=["authentication"])
logger = logging.getLogger(__name__)


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        date_of_birth=user.date_of_birth,
        interests=user.interests or [],
        created_at=user.created_at.isoformat() if user.created_at else None,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create an account and return a token for it."""
    if await user_store.get_user_by_email(db, payload.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")

    user = await user_store.create_user(
        db,
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        date_of_birth=payload.date_of_birth,
    )
    logger.info(f"Registered user id={user.id}")

    return AuthResponse(id=user.id, name=user.name, email=user.email, token=create_access_token(user.id))


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Exchange email and password for a token."""
    user = await user_store.get_user_by_email(db, payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credentials")

    return AuthResponse(id=user.id, name=user.name, email=user.email, token=create_access_token(user.id))


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """
    Get current authenticated user information.

    Args:
        current_user: Current authenticated user (from the bearer token)

    Returns:
        UserResponse with profile and interests
    """
    return _user_response(current_user)


@router.put("/interests", response_model=UserResponse)
@router.put("/update-interests", response_model=UserResponse)
async def update_interests(
    payload: InterestsRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Replace the user's interests; every value must be a known interest."""
    invalid = [interest for interest in payload.interests if interest not in VALID_INTERESTS]
    if invalid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid interests: {', '.join(invalid)}",
        )

    user = await user_store.update_interests(db, current_user, payload.interests)
    return _user_response(user)
