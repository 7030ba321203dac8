import hmac
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import AuthorizationError, ServiceCredentialError
from database import get_db
from models import Profile, User, UserRole
from utils.jwt_handler import create_jwt_token, decode_jwt_token

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/users/login")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(user: User) -> str:
    return create_jwt_token({"sub": user.id})


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = decode_jwt_token(token)
    if payload is None or not payload.get("sub"):
        raise credentials_exception

    user = db.get(User, payload["sub"])
    if user is None:
        raise credentials_exception
    return user


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return current_user


def get_current_profile(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> Profile:
    profile = db.get(Profile, current_user.id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile


def require_moderator(profile: Profile = Depends(get_current_profile)) -> Profile:
    if profile.role != UserRole.MODERATOR:
        raise AuthorizationError("You must be a moderator to access this page")
    return profile


def service_key_matches(authorization: Optional[str], apikey: Optional[str]) -> bool:
    """
    Check a request's service credential

    Accepts either "Authorization: Bearer <key>" or an "apikey" header. An
    unset SERVICE_ROLE_KEY rejects everything.
    """
    expected = settings.SERVICE_ROLE_KEY
    if not expected:
        return False

    presented = apikey
    if authorization and authorization.lower().startswith("bearer "):
        presented = authorization[7:].strip()
    if not presented:
        return False
    return hmac.compare_digest(presented.encode(), expected.encode())


def require_service_role(
    authorization: Optional[str] = Header(None),
    apikey: Optional[str] = Header(None),
) -> None:
    if not service_key_matches(authorization, apikey):
        raise ServiceCredentialError("Service credential required")
