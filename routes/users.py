from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr
from typing import List, Optional
from datetime import datetime
import logging

from database import get_db
from models import Profile, User, UserRole
from auth import (
    verify_password,
    get_password_hash,
    create_access_token,
    get_current_profile,
)
from core.errors import PersistenceError
from core.reports import count_reports, count_verifications_by, leaderboard, reading_store
from core.trust import MODERATOR_THRESHOLD

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginSchema(BaseModel):

    email: EmailStr
    password: str

    class Config:
        # Configuration to allow example data to be shown in Swagger UI
        json_schema_extra = {
            "example": {
                "email": "user@example.com",
                "password": "securepassword123"
            }
        }


class UserCreate(BaseModel):
    email: EmailStr
    full_name: str
    password: str


class ProfileResponse(BaseModel):
    id: str
    full_name: str
    role: UserRole
    trust_score: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MeResponse(ProfileResponse):
    email: str
    moderator_progress: float


class LeaderboardEntry(BaseModel):
    full_name: str
    trust_score: int

    class Config:
        from_attributes = True


class DashboardResponse(BaseModel):
    total_reports: int
    my_verifications: int
    leaderboard: List[LeaderboardEntry]


class Token(BaseModel):
    access_token: str
    token_type: str


def moderator_progress(trust_score: int) -> float:
    """Percentage of the way to the moderator threshold, capped at 100"""
    return min(trust_score / MODERATOR_THRESHOLD * 100, 100.0)


def _find_user(db: Session, email: str) -> Optional[User]:
    with reading_store(db, "look up user"):
        return db.query(User).filter(User.email == email).first()


@router.post("/register", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
def register_user(user: UserCreate, db: Session = Depends(get_db)):
    if not user.full_name.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Full name must not be empty"
        )

    # Check if user exists
    if _find_user(db, user.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    # User and profile are created together
    new_user = User(
        email=user.email,
        hashed_password=get_password_hash(user.password)
    )
    db.add(new_user)
    try:
        db.flush()
        profile = Profile(id=new_user.id, full_name=user.full_name.strip())
        db.add(profile)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Registration failed: {str(e)}", exc_info=True)
        raise PersistenceError("Could not register user") from e

    db.refresh(profile)
    logger.info(f"Registered user {new_user.id}")
    return profile


@router.post("/login", response_model=Token)
def login(user_data: LoginSchema, db: Session = Depends(get_db)):
    user = _find_user(db, user_data.email)

    if not user or not verify_password(user_data.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return {"access_token": create_access_token(user), "token_type": "bearer"}


@router.get("/me", response_model=MeResponse)
def read_users_me(profile: Profile = Depends(get_current_profile)):
    return MeResponse(
        id=profile.id,
        full_name=profile.full_name,
        role=profile.role,
        trust_score=profile.trust_score,
        created_at=profile.created_at,
        email=profile.user.email,
        moderator_progress=moderator_progress(profile.trust_score),
    )


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
def get_leaderboard(limit: int = 5, db: Session = Depends(get_db)):
    return leaderboard(db, limit=limit)


@router.get("/me/dashboard", response_model=DashboardResponse)
def read_dashboard(
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    """
    Counts and leaderboard shown on the user's dashboard.
    """
    return DashboardResponse(
        total_reports=count_reports(db),
        my_verifications=count_verifications_by(db, profile.id),
        leaderboard=[LeaderboardEntry.model_validate(p) for p in leaderboard(db)],
    )
